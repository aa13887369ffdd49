"""rawvolt: reader for multi-antenna ``.raw`` radio voltage recordings."""

from .input import (
    Header,
    Reader,
    RawFormatError,
    MissingFieldError,
    GeometryError,
    UnsupportedFormatError,
    HeaderTruncatedError,
    decode_header,
    validate_geometry,
    sexagesimal_to_decimal,
    find_raw_files,
)

__version__ = "0.1.0"

__all__ = [
    'Header',
    'Reader',
    'RawFormatError',
    'MissingFieldError',
    'GeometryError',
    'UnsupportedFormatError',
    'HeaderTruncatedError',
    'decode_header',
    'validate_geometry',
    'sexagesimal_to_decimal',
    'find_raw_files',
]
