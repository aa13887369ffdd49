# This module provides buffer and I/O utilities for input processing.

"""Common utilities used while reading ``.raw`` files."""
from __future__ import annotations

import os
import re

import numpy as np


DIRECTIO_ALIGNMENT = 512

_INT_PREFIX = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def aligned_buffer(size: int, alignment: int = DIRECTIO_ALIGNMENT) -> np.ndarray:
    """Return a zeroed ``uint8`` array of ``size`` bytes whose address is a multiple of ``alignment``."""
    raw = np.zeros(size + alignment, dtype=np.uint8)
    start = (-raw.ctypes.data) % alignment
    return raw[start:start + size]


def byte_view(buffer) -> memoryview:
    """Return a flat, writable byte view over ``buffer``.

    Accepts anything exposing the buffer protocol (``bytearray``,
    ``memoryview``, contiguous numpy arrays).
    """
    view = memoryview(buffer)
    if view.readonly:
        raise ValueError("destination buffer is read-only")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def read_fully(f, view: memoryview) -> int:
    """Fill ``view`` from the current position of ``f``, retrying short reads.

    Returns the number of bytes read, which is smaller than ``len(view)`` only
    when end of file was reached. I/O failures raise ``OSError``.
    """
    total = 0
    size = len(view)
    while total < size:
        n = f.readinto(view[total:])
        if not n:
            break
        total += n
    return total


def pread_fully(fd: int, view: memoryview, offset: int) -> int:
    """Fill ``view`` with bytes read at absolute ``offset`` of ``fd``.

    Positional reads leave the descriptor's file position untouched, so this
    may run concurrently with other readers of the same descriptor. Returns
    the number of bytes read (short only at end of file); I/O failures raise
    ``OSError``.
    """
    total = 0
    size = len(view)
    while total < size:
        chunk = os.pread(fd, size - total, offset + total)
        if not chunk:
            break
        view[total:total + len(chunk)] = chunk
        total += len(chunk)
    return total


def parse_int_prefix(text: str) -> int:
    """Parse the leading integer of ``text`` the way ``strtol(text, NULL, 0)`` does.

    Hex (``0x``) and octal (leading ``0``) prefixes are honoured; text with no
    leading digits yields 0.
    """
    match = _INT_PREFIX.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits, 16)
    elif len(digits) > 1 and digits[0] == "0":
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    return -value if sign == "-" else value


def parse_float_prefix(text: str) -> float:
    """Parse the leading number of ``text`` the way ``strtod`` does; 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return 0.0
    return float(match.group(1))


def wrap_integer(value: int, bits: int, signed: bool) -> int:
    """Reduce ``value`` to a two's-complement integer of the given width."""
    mask = (1 << bits) - 1
    value &= mask
    if signed and value >> (bits - 1):
        value -= 1 << bits
    return value
