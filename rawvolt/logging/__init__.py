# This module collects logging utilities for the reader.

"""
Logging package for rawvolt
===========================

Configuration, formatters and structured helpers used while reading
``.raw`` recordings.
"""

from .logging_config import (
    RawvoltLogger,
    RawvoltFormatter,
    Colors,
    setup_logging,
    get_global_logger,
    set_global_logger
)

from .reader_logging import (
    log_header_decoded,
    log_block_skip,
    log_missing_blocks,
    log_band_read_plan,
    log_reader_error
)

__all__ = [
    'RawvoltLogger',
    'RawvoltFormatter',
    'Colors',
    'setup_logging',
    'get_global_logger',
    'set_global_logger',
    'log_header_decoded',
    'log_block_skip',
    'log_missing_blocks',
    'log_band_read_plan',
    'log_reader_error'
]
