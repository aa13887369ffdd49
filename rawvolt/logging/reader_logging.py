# This module logs header decoding and block reading events.

"""
Reader Logging Management for rawvolt
=====================================

This module provides specialized functions to display detailed information
from the reader, covering header decoding, block skipping and band reads.
"""

from ..config import config
from .logging_config import get_global_logger


def log_header_decoded(index: int, header) -> None:
    """
    Logs a successfully decoded header.

    Args:
        index: 1-based header number within the file
        header: Decoded :class:`~rawvolt.input.header.Header`
    """
    logger = get_global_logger()
    logger.logger.debug(
        f"HEADER {index}: pktidx={header.pktidx}, blocsize={header.blocsize:,}, "
        f"nants={header.nants}, channels={header.num_channels}, "
        f"timesteps={header.num_timesteps}, npol={header.npol}"
    )
    logger.logger.debug(
        f"HEADER {index}: hdr_size={header.hdr_size}, data_offset={header.data_offset:,}, "
        f"directio={header.directio}"
    )

    if config.DEBUG_HEADER_INFO:
        logger.logger.debug(f"HEADER {index}: obsfreq={header.obsfreq} MHz, obsbw={header.obsbw} MHz")
        logger.logger.debug(f"HEADER {index}: tbin={header.tbin:.3e} s, mjd={header.mjd:.6f}")
        logger.logger.debug(f"HEADER {index}: ra={header.ra:.6f} h, dec={header.dec:.6f} deg")
        logger.logger.debug(
            f"HEADER {index}: src_name={header.src_name}, telescop={header.telescop}, "
            f"beam_id={header.beam_id}"
        )


def log_block_skip(index: int, advance: int) -> None:
    """
    Logs skipping the unread remainder of a block.

    Args:
        index: 1-based number of the block being skipped
        advance: Bytes skipped
    """
    logger = get_global_logger()
    logger.logger.debug(f"BLOCK {index}: skipping {advance:,} unread bytes")


def log_missing_blocks(index: int, previous_pktidx: int, pktidx: int, missing: int) -> None:
    """
    Logs a gap in PKTIDX between consecutive headers.

    Args:
        index: 1-based header number within the file
        previous_pktidx: PKTIDX of the previous header
        pktidx: PKTIDX of this header
        missing: Number of missing blocks
    """
    if missing <= 0 or not config.WARN_ON_MISSING_BLOCKS:
        return
    logger = get_global_logger()
    logger.logger.warning(
        f"HEADER {index}: {missing} missing block(s) between pktidx {previous_pktidx} and {pktidx}"
    )


def log_band_read_plan(band: int, num_bands: int, nants: int, band_bytes: int,
                       preband_bytes: int, asynchronous: bool) -> None:
    """
    Logs the layout of a band read.

    Args:
        band: Band index
        num_bands: Total number of bands
        nants: Number of antennas read
        band_bytes: Contiguous bytes per antenna
        preband_bytes: Bytes preceding the band within each antenna
        asynchronous: Whether reads are dispatched to a worker pool
    """
    logger = get_global_logger()
    mode = "async" if asynchronous else "sync"
    logger.logger.debug(
        f"BAND {band}/{num_bands} ({mode}): antennas={nants}, band_bytes={band_bytes:,}, "
        f"preband_bytes={preband_bytes:,}"
    )


def log_reader_error(filename: str, message: str) -> None:
    """
    Logs the error that put a reader into its error state.

    Args:
        filename: File being read
        message: Error message
    """
    logger = get_global_logger()
    logger.logger.error(f"{filename}: {message}")
