"""Input module for ``.raw`` voltage recordings.

Header decoding, sequential and band-wise block reading, and file discovery.
"""

from .header import (
    MAX_RAW_HEADER_SIZE,
    Header,
    RawFormatError,
    MissingFieldError,
    GeometryError,
    UnsupportedFormatError,
    HeaderTruncatedError,
    decode_header,
    validate_geometry,
)

from .header_scanner import (
    RECORD_SIZE,
    find_value,
    get_int,
    get_uint,
    get_uint64,
    get_float,
    get_str,
    header_size,
)

from .sexagesimal import sexagesimal_to_decimal

from .raw_reader import (
    Reader,
    ErrorState,
    get_band_executor,
    shutdown_band_executor,
)

from .file_finder import (
    detect_file_type,
    validate_file_compatibility,
    find_raw_files,
)

from .utils import (
    aligned_buffer,
    read_fully,
    pread_fully,
)

__all__ = [
    # Header model and decoding
    'MAX_RAW_HEADER_SIZE',
    'Header',
    'RawFormatError',
    'MissingFieldError',
    'GeometryError',
    'UnsupportedFormatError',
    'HeaderTruncatedError',
    'decode_header',
    'validate_geometry',

    # Record scanning
    'RECORD_SIZE',
    'find_value',
    'get_int',
    'get_uint',
    'get_uint64',
    'get_float',
    'get_str',
    'header_size',
    'sexagesimal_to_decimal',

    # Reading
    'Reader',
    'ErrorState',
    'get_band_executor',
    'shutdown_band_executor',

    # File discovery
    'detect_file_type',
    'validate_file_compatibility',
    'find_raw_files',

    # I/O utilities
    'aligned_buffer',
    'read_fully',
    'pread_fully',
]
