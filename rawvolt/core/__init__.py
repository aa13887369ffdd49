# This module aggregates the time and pointing helpers.

"""Astronomical conversions for decoded headers."""

from .mjd_utils import (
    unix_to_mjd,
    header_start_time,
    block_start_mjd,
    block_mid_mjd,
    block_time_range,
    header_pointing,
)

__all__ = [
    'unix_to_mjd',
    'header_start_time',
    'block_start_mjd',
    'block_mid_mjd',
    'block_time_range',
    'header_pointing',
]
