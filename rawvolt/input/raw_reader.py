# This module handles sequential and band-wise reading of .raw files.

"""Read ``.raw`` voltage recordings block by block.

A :class:`Reader` owns one file. The sequential path (:meth:`Reader.read_header`
then :meth:`Reader.read_data`) walks the file through its cursor. The band
path (:meth:`Reader.read_band`, :meth:`Reader.read_band_async`) uses
positional reads only, so it can run at any time, concurrently with itself,
without disturbing the cursor.

Errors on the sequential path never raise. The first one is recorded and the
reader stays in error state: later sequential calls return a falsy value
without touching the file. Callers check :meth:`Reader.error` and
:meth:`Reader.error_message` when a call fails.
"""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Iterator, List, Optional, Tuple

import numpy as np

from ..config import config
from ..logging import (
    get_global_logger,
    log_band_read_plan,
    log_block_skip,
    log_header_decoded,
    log_missing_blocks,
    log_reader_error,
)
from .header import MAX_RAW_HEADER_SIZE, Header, RawFormatError, decode_header, validate_geometry
from .utils import aligned_buffer, byte_view, pread_fully, read_fully


logger = logging.getLogger(__name__)

_band_executor: Optional[ThreadPoolExecutor] = None
_band_executor_workers = 0
_band_executor_lock = threading.Lock()


def get_band_executor(nants: int = 1) -> ThreadPoolExecutor:
    """Return the shared pool used by :meth:`Reader.read_band_async`.

    The pool is created on first use, sized by ``config.band_worker_count``.
    It is rebuilt with more workers when a later call needs more than it has;
    the old pool is dropped rather than shut down, so callers still holding it
    can submit and its queued tasks run to completion.
    """
    global _band_executor, _band_executor_workers
    workers = config.band_worker_count(nants)
    with _band_executor_lock:
        if _band_executor is not None and workers > _band_executor_workers:
            logger.debug(
                "Growing band-read pool from %d to %d worker(s)", _band_executor_workers, workers
            )
            _band_executor = None
        if _band_executor is None:
            logger.debug("Starting band-read pool with %d worker(s)", workers)
            _band_executor = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="rawvolt-band"
            )
            _band_executor_workers = workers
        return _band_executor


def shutdown_band_executor(wait: bool = True) -> None:
    """Shut down the shared band-read pool; a new one is created on next use."""
    global _band_executor, _band_executor_workers
    with _band_executor_lock:
        if _band_executor is not None:
            _band_executor.shutdown(wait=wait)
            _band_executor = None
            _band_executor_workers = 0


class ErrorState:
    """Sticky error slot: the first recorded message wins."""

    def __init__(self):
        self.used = False
        self.message = ""

    def set(self, message: str) -> bool:
        if self.used:
            return False
        self.used = True
        self.message = message
        return True

    def __bool__(self) -> bool:
        return self.used

    def __str__(self) -> str:
        return self.message


class Reader:
    """Reader for one ``.raw`` file.

    Opening never raises: a file that cannot be opened is reported by the
    first :meth:`read_header` call.

    Args:
        filename: Path of the ``.raw`` file
        executor: Default executor for :meth:`read_band_async`; the shared
            band-read pool is used when ``None``
    """

    def __init__(self, filename, executor: Optional[Executor] = None):
        self.filename = str(filename)
        self.executor = executor

        self._file = None
        self._closed = False
        self._open_error: Optional[OSError] = None
        try:
            self._file = open(self.filename, "rb", buffering=0)
        except OSError as e:
            self._open_error = e
        else:
            get_global_logger().file_opened(self.filename, os.fstat(self._file.fileno()).st_size)

        # Number of headers read so far.
        self._headers_read = 0
        # Size of the block the cursor is in, and how much of it was consumed.
        self._current_block_size = 0
        self._current_block_offset = 0
        # PKTIDX of the last header read.
        self._pktidx = 0

        self._header_buffer = aligned_buffer(MAX_RAW_HEADER_SIZE)
        self._err = ErrorState()

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Tuple[Header, np.ndarray]]:
        """Yield ``(header, data)`` for each block until end of file or error."""
        while True:
            header = self.read_header()
            if header is None:
                return
            data = self.read_block(header)
            if data is None:
                return
            yield header, data

    def close(self) -> None:
        """Close the file. Later sequential calls fail with "reader is closed"."""
        self._closed = True
        if self._file is None:
            return
        self._file.close()
        self._file = None
        get_global_logger().file_finished(
            self.filename, self._headers_read, self.error_message() or None
        )

    @property
    def headers_read(self) -> int:
        return self._headers_read

    def error(self) -> bool:
        """Whether the reader is in error state."""
        return bool(self._err)

    def error_message(self) -> str:
        """Message of the first error, or an empty string."""
        return str(self._err)

    def _fail(self, message: str) -> None:
        if self._err.set(message):
            log_reader_error(self.filename, message)

    # ------------------------------------------------------------------
    # Sequential path
    # ------------------------------------------------------------------

    def read_header(self) -> Optional[Header]:
        """Read the next header and leave the cursor at the start of its data.

        Any unread part of the previous block is skipped first.

        Returns:
            The decoded :class:`Header`, or ``None`` at end of file or on
            error. Check :meth:`error` to tell them apart.
        """
        if self.error():
            return None
        if self._closed:
            self._fail(f"reader is closed: {self.filename}")
            return None
        if self._file is None:
            self._fail(f"could not open {self.filename}: {self._open_error}")
            return None

        next_index = self._headers_read + 1
        try:
            if self._headers_read > 0:
                advance = self._current_block_size - self._current_block_offset
                if advance != 0:
                    log_block_skip(self._headers_read, advance)
                    self._file.seek(advance, os.SEEK_CUR)

            position = self._file.tell()
            nread = read_fully(self._file, memoryview(self._header_buffer))
        except OSError as e:
            self._fail(f"error reading block header #{next_index} from {self.filename}: {e}")
            return None

        if nread == 0:
            return None

        try:
            header = decode_header(self._header_buffer, nread, header_offset=position)
            validate_geometry(header)
        except RawFormatError as e:
            self._fail(f"error reading block header #{next_index} from {self.filename}: {e}")
            return None

        if self._headers_read > 0:
            header.missing_blocks = header.pktidx - self._pktidx - 1
            log_missing_blocks(next_index, self._pktidx, header.pktidx, header.missing_blocks)
        else:
            header.missing_blocks = 0

        try:
            self._file.seek(header.data_offset)
        except OSError as e:
            self._fail(f"error seeking to block #{next_index} in {self.filename}: {e}")
            return None

        self._pktidx = header.pktidx
        self._current_block_size = header.blocsize
        self._current_block_offset = 0
        self._headers_read = next_index
        log_header_decoded(next_index, header)
        return header

    def read_data(self, buffer) -> bool:
        """Read the whole data block of the current header into ``buffer``.

        ``buffer`` is any writable object supporting the buffer protocol with
        room for ``blocsize`` bytes.

        Returns:
            Whether the read succeeded.

        Raises:
            ValueError: ``buffer`` is read-only or too small.
        """
        if self.error():
            return False
        if self._closed:
            self._fail(f"reader is closed: {self.filename}")
            return False
        if self._headers_read == 0:
            self._fail("cannot read_data before a header has been read")
            return False
        if self._current_block_offset != 0:
            self._fail("cannot read_data when data from this block has already been read")
            return False

        view = byte_view(buffer)
        size = self._current_block_size
        if len(view) < size:
            raise ValueError(f"buffer holds {len(view)} bytes but the block needs {size}")

        try:
            nread = read_fully(self._file, view[:size])
        except OSError as e:
            self._fail(f"error while reading {self.filename}: {e}")
            return False
        self._current_block_offset += nread
        if nread < size:
            self._fail(
                f"incomplete block #{self._headers_read} at end of {self.filename}: "
                f"{nread} of {size} bytes"
            )
            return False
        return True

    def allocate_block(self, header: Header) -> np.ndarray:
        """Return a 512-byte aligned ``uint8`` buffer large enough for one block."""
        return aligned_buffer(header.blocsize)

    def read_block(self, header: Header) -> Optional[np.ndarray]:
        """Read the current block and return it shaped by :attr:`Header.data_shape`."""
        buffer = self.allocate_block(header)
        if not self.read_data(buffer):
            return None
        return header.as_array(buffer)

    # ------------------------------------------------------------------
    # Band path
    # ------------------------------------------------------------------

    def _band_plan(self, header: Header, band: int, num_bands: int, buffer,
                   asynchronous: bool) -> List[Tuple[memoryview, int]]:
        band_bytes, preband_bytes = header.band_layout(band, num_bands)
        view = byte_view(buffer)
        needed = header.nants * band_bytes
        if len(view) < needed:
            raise ValueError(f"buffer holds {len(view)} bytes but the band needs {needed}")

        log_band_read_plan(band, num_bands, header.nants, band_bytes, preband_bytes, asynchronous)
        plan = []
        for antenna in range(header.nants):
            offset = header.data_offset + preband_bytes + antenna * num_bands * band_bytes
            dest = view[antenna * band_bytes:(antenna + 1) * band_bytes]
            plan.append((dest, offset))
        return plan

    def _read_antenna_band(self, dest: memoryview, offset: int) -> bool:
        f = self._file
        if f is None:
            return False
        try:
            nread = pread_fully(f.fileno(), dest, offset)
        except (OSError, ValueError) as e:
            logger.warning("Band read of %d bytes at offset %d failed: %s", len(dest), offset, e)
            return False
        if nread < len(dest):
            logger.debug("Short band read at offset %d: %d of %d bytes", offset, nread, len(dest))
            return False
        return True

    def read_band(self, header: Header, band: int, num_bands: int, buffer) -> bool:
        """Read one frequency band of every antenna into ``buffer``.

        The band covers ``num_channels / num_bands`` channels. Antenna ``a``
        lands at ``buffer[a * band_bytes:(a + 1) * band_bytes]``. The cursor
        and error state are left untouched.

        Returns:
            Whether every antenna was read completely.

        Raises:
            ValueError: ``num_bands`` does not divide ``num_channels``,
                ``band`` is out of range, or ``buffer`` is too small.
        """
        plan = self._band_plan(header, band, num_bands, buffer, asynchronous=False)
        for dest, offset in plan:
            if not self._read_antenna_band(dest, offset):
                return False
        return True

    def read_band_async(self, header: Header, band: int, num_bands: int, buffer,
                        executor: Optional[Executor] = None) -> List[Future]:
        """Like :meth:`read_band` but with one task per antenna.

        Returns one future per antenna, in antenna order, each resolving to
        whether that antenna's read succeeded. ``buffer`` is fully populated
        only once every future has completed; tasks may finish in any order.
        """
        plan = self._band_plan(header, band, num_bands, buffer, asynchronous=True)
        pool = executor or self.executor or get_band_executor(header.nants)
        return [pool.submit(self._read_antenna_band, dest, offset) for dest, offset in plan]
