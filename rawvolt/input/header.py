# This module decodes and validates .raw block headers.

"""Header model and decoder for ``.raw`` voltage recordings.

The ``.raw`` format is close to FITS: every block starts with a header made
of 80-byte ASCII records, followed by a binary data block. The header lacks
the fields FITS requires and the data is not stored in any FITS layout, so
FITS libraries cannot read these files, but the record syntax is the same.

The data block is a four-dimensional row-major array indexed by::

    data[antenna][channel][timestep][polarization]

with dimensions ``nants, num_channels, num_timesteps, npol``. Every entry is
two signed ``nbits``-bit values, real then imaginary. Only ``nbits = 8`` is
supported, so each entry is two bytes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from . import header_scanner as scanner
from .sexagesimal import sexagesimal_to_decimal
from .utils import DIRECTIO_ALIGNMENT, wrap_integer


MAX_RAW_HEADER_SIZE = 25600
SECONDS_PER_DAY = 86400.0
DEFAULT_IMJD = 51545
SUPPORTED_NBITS = 8


class RawFormatError(ValueError):
    """Base error for headers that cannot be decoded or validated."""


class MissingFieldError(RawFormatError):
    """A required header key is absent or zero."""

    def __init__(self, field_name: str):
        super().__init__(f"{field_name} not found in header")
        self.field_name = field_name


class GeometryError(RawFormatError):
    """Header dimensions do not describe a valid data block."""


class UnsupportedFormatError(RawFormatError):
    """The header describes a sample format this package cannot read."""


class HeaderTruncatedError(RawFormatError):
    """The header bytes end before a complete header could be found."""


@dataclass
class Header:
    """Metadata of one block of a ``.raw`` file.

    Most fields map directly to header keys; ``num_channels``,
    ``num_timesteps``, ``missing_blocks`` and ``data_offset`` are derived
    while reading.
    """

    # BLOCSIZE: size of the data block in bytes, excluding direct I/O padding.
    blocsize: int = 0
    # NPOL, with 4 (the number of cross-pol products) read as 2.
    npol: int = 0
    # OBSNCHAN: frequency channels times antennas.
    obsnchan: int = 0
    # NBITS: bits per real or imaginary component.
    nbits: int = SUPPORTED_NBITS
    # NANTS: number of antennas in the block.
    nants: int = 1
    # PKTIDX: index that counts up through the file.
    pktidx: int = -1
    # OBSFREQ: centre frequency of the recorded band, MHz.
    obsfreq: float = 0.0
    # OBSBW: bandwidth in MHz; negative means a reversed frequency axis.
    obsbw: float = 0.0
    # TBIN: seconds per timestep.
    tbin: float = 0.0
    # Right ascension in hours, from RA_STR.
    ra: float = 0.0
    # Declination in degrees, from DEC_STR.
    dec: float = 0.0
    # Start MJD from STT_IMJD and STT_SMJD, accurate to the second. This is
    # the start of the recording rather than of this block.
    mjd: float = 0.0
    # BEAM_ID: -1 for unknown or single-beam receivers.
    beam_id: int = -1
    src_name: str = "Unknown"
    telescop: str = "Unknown"
    directio: int = 0
    # Header bytes up to and including the END record, without padding.
    hdr_size: int = 0
    # Header bytes including direct I/O padding.
    padded_hdr_size: int = 0
    # Absolute file offset of the data block.
    data_offset: int = 0
    # PKTIDX gap to the previous block read by the same Reader, minus one.
    missing_blocks: int = 0
    num_timesteps: int = 0
    # Channels per antenna; unlike obsnchan this does not count antennas.
    num_channels: int = 0
    buffer: bytes = field(default=b"", repr=False)

    @property
    def bytes_per_timestep(self) -> int:
        # 2 for the real and imaginary parts
        return 2 * self.npol * self.obsnchan * self.nbits // 8

    @property
    def data_size(self) -> int:
        return self.nants * self.num_channels * self.num_timesteps * self.npol * 2

    @property
    def data_shape(self) -> Tuple[int, int, int, int, int]:
        return (self.nants, self.num_channels, self.num_timesteps, self.npol, 2)

    def as_array(self, data) -> np.ndarray:
        """View block bytes as ``int8[antenna, channel, timestep, pol, re/im]``."""
        return np.frombuffer(data, dtype=np.int8, count=self.data_size).reshape(self.data_shape)

    def band_layout(self, band: int, num_bands: int) -> Tuple[int, int]:
        """Return ``(band_bytes, preband_bytes)`` for one frequency band.

        Antenna is the slowest-moving index and channel the next, so each
        antenna holds ``num_bands`` contiguous runs of ``band_bytes`` bytes.
        """
        if num_bands <= 0 or self.num_channels % num_bands != 0:
            raise ValueError(
                f"num_bands={num_bands} does not divide num_channels={self.num_channels}"
            )
        if not 0 <= band < num_bands:
            raise ValueError(f"band={band} is outside [0, {num_bands})")
        channels_per_band = self.num_channels // num_bands
        band_bytes = channels_per_band * self.num_timesteps * self.npol * 2
        return band_bytes, band * band_bytes

    def get_int(self, key: str, default: int) -> int:
        return scanner.get_int(self.buffer, key, default)

    def get_uint(self, key: str, default: int) -> int:
        return scanner.get_uint(self.buffer, key, default)

    def get_uint64(self, key: str, default: int) -> int:
        return scanner.get_uint64(self.buffer, key, default)

    def get_float(self, key: str, default: float) -> float:
        return scanner.get_float(self.buffer, key, default)

    def get_str(self, key: str, default: str) -> str:
        return scanner.get_str(self.buffer, key, default)

    def get_start_time(self) -> float:
        """Unix start time of this block, from SYNCTIME and PIPERBLK.

        SYNCTIME is rounded to the second, so the result carries an offset
        that is constant across the blocks of one file.
        """
        synctime = self.get_uint("SYNCTIME", 0)
        if synctime <= 0:
            raise MissingFieldError("SYNCTIME")
        piperblk = self.get_uint("PIPERBLK", 0)
        if piperblk <= 0:
            raise MissingFieldError("PIPERBLK")
        time_per_packet = self.tbin * self.num_timesteps / piperblk
        return synctime + self.pktidx * time_per_packet

    def get_mid_time(self) -> float:
        """Unix time of the temporal midpoint of this block."""
        return self.get_start_time() + (self.tbin * self.num_timesteps) / 2.0


def decode_header(buffer, nbytes: Optional[int] = None, header_offset: int = 0) -> Header:
    """Decode the header at the start of ``buffer``.

    Args:
        buffer: Bytes read from the start of a header, usually a full
            ``MAX_RAW_HEADER_SIZE`` area (which may include data bytes).
        nbytes: Number of valid bytes in ``buffer``; defaults to all of it.
        header_offset: File offset of the header, used to fill ``data_offset``.

    Raises:
        HeaderTruncatedError: Fewer than one record, or no END record.
        MissingFieldError: A required key is absent or zero.

    Geometry (``obsnchan``/``nants``, ``nbits``, ``blocsize``) is checked
    separately by :func:`validate_geometry`.
    """
    data = bytes(memoryview(buffer).cast("B")[:nbytes])
    if len(data) < scanner.RECORD_SIZE:
        raise HeaderTruncatedError(f"only {len(data)} header bytes available")

    header = Header(
        blocsize=scanner.get_int(data, "BLOCSIZE", 0),
        npol=scanner.get_int(data, "NPOL", 0),
        obsnchan=scanner.get_int(data, "OBSNCHAN", 0),
        nbits=scanner.get_uint(data, "NBITS", 8),
        obsfreq=scanner.get_float(data, "OBSFREQ", 0.0),
        obsbw=scanner.get_float(data, "OBSBW", 0.0),
        tbin=scanner.get_float(data, "TBIN", 0.0),
        directio=scanner.get_int(data, "DIRECTIO", 0),
        pktidx=wrap_integer(scanner.get_uint64(data, "PKTIDX", -1), 64, signed=True),
        beam_id=scanner.get_int(data, "BEAM_ID", -1),
        nants=scanner.get_uint(data, "NANTS", 1),
        ra=sexagesimal_to_decimal(scanner.get_str(data, "RA_STR", "0.0")),
        dec=sexagesimal_to_decimal(scanner.get_str(data, "DEC_STR", "0.0")),
        src_name=scanner.get_str(data, "SRC_NAME", "Unknown"),
        telescop=scanner.get_str(data, "TELESCOP", "Unknown"),
    )

    imjd = scanner.get_int(data, "STT_IMJD", DEFAULT_IMJD)
    smjd = scanner.get_int(data, "STT_SMJD", 0)
    header.mjd = float(imjd) + float(smjd) / SECONDS_PER_DAY

    required = (
        ("BLOCSIZE", header.blocsize == 0),
        ("NPOL", header.npol == 0),
        ("OBSNCHAN", header.obsnchan == 0),
        ("OBSFREQ", header.obsfreq == 0.0),
        ("OBSBW", header.obsbw == 0.0),
        ("TBIN", header.tbin == 0.0),
        ("PKTIDX", header.pktidx == -1),
    )
    for field_name, missing in required:
        if missing:
            raise MissingFieldError(field_name)

    # 4 counts the cross-pol products; only 2 polarizations are present
    if header.npol == 4:
        header.npol = 2

    header.hdr_size = scanner.header_size(data, directio=False)
    if header.hdr_size == 0:
        raise HeaderTruncatedError(f"no END record in the first {len(data)} header bytes")
    header.padded_hdr_size = scanner.header_size(
        data,
        directio=bool(header.directio),
        area_size=MAX_RAW_HEADER_SIZE,
        alignment=DIRECTIO_ALIGNMENT,
    )
    header.data_offset = header_offset + header.padded_hdr_size
    header.buffer = data[:header.hdr_size]
    return header


def validate_geometry(header: Header) -> Header:
    """Check block dimensions and fill ``num_channels`` and ``num_timesteps``.

    Raises:
        GeometryError: ``obsnchan`` is not a multiple of ``nants`` or
            ``blocsize`` is not a whole number of timesteps.
        UnsupportedFormatError: ``nbits`` is not 8.
    """
    if header.nants <= 0 or header.obsnchan % header.nants != 0:
        raise GeometryError(
            f"bad obsnchan/nants: {header.obsnchan} % {header.nants} != 0"
        )
    header.num_channels = header.obsnchan // header.nants

    if header.nbits != SUPPORTED_NBITS:
        raise UnsupportedFormatError(
            f"only nbits = {SUPPORTED_NBITS} is supported, header has nbits = {header.nbits}"
        )

    bytes_per_timestep = header.bytes_per_timestep
    if (bytes_per_timestep <= 0 or header.blocsize < 0
            or header.blocsize % bytes_per_timestep != 0):
        raise GeometryError(
            f"invalid block dimensions: blocsize {header.blocsize} "
            f"is not divisible by {bytes_per_timestep}"
        )
    header.num_timesteps = header.blocsize // bytes_per_timestep
    return header
