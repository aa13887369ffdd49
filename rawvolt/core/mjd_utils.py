# This module provides time and pointing conversions for decoded headers.

"""Convert header timestamps and coordinates to astropy objects."""
from __future__ import annotations

import logging
from typing import Tuple

import astropy.units as u
from astropy.coordinates import SkyCoord
from astropy.time import Time

logger = logging.getLogger(__name__)


def unix_to_mjd(unix_time: float) -> float:
    """
    Convert a unix timestamp (UTC) to MJD.

    Parameters
    ----------
    unix_time : float
        Seconds since 1970-01-01 UTC

    Returns
    -------
    float
        MJD (UTC)
    """
    return Time(unix_time, format="unix", scale="utc").mjd


def header_start_time(header) -> Time:
    """Recording start time from STT_IMJD/STT_SMJD as an astropy ``Time``."""
    return Time(header.mjd, format="mjd", scale="utc")


def block_start_mjd(header) -> float:
    """MJD at which the block described by ``header`` starts.

    Needs SYNCTIME and PIPERBLK in the header; raises
    :class:`~rawvolt.input.header.MissingFieldError` otherwise.
    """
    return unix_to_mjd(header.get_start_time())


def block_mid_mjd(header) -> float:
    """MJD of the temporal midpoint of the block described by ``header``."""
    return unix_to_mjd(header.get_mid_time())


def block_time_range(header) -> Tuple[Time, Time]:
    """Start and end of the block as astropy ``Time`` objects."""
    start = Time(header.get_start_time(), format="unix", scale="utc")
    duration = header.tbin * header.num_timesteps
    logger.debug("Block pktidx=%d spans %.6f s", header.pktidx, duration)
    return start, start + duration * u.s


def header_pointing(header) -> SkyCoord:
    """
    Telescope pointing of the block.

    Parameters
    ----------
    header : Header
        Decoded header; ``ra`` is in hours and ``dec`` in degrees

    Returns
    -------
    SkyCoord
        ICRS coordinate of the pointing
    """
    return SkyCoord(header.ra * u.hourangle, header.dec * u.deg, frame="icrs")
