# This module scans FITS-style 80-byte header records.

"""Locate keys in the ASCII header of a ``.raw`` block and read typed values.

A header is a run of 80-byte ASCII records of the form ``KEY = value`` (or
``KEY value``), terminated by a record starting with ``"END "``. String
values may be enclosed in single quotes. Numeric getters first try the
canonical textual form of the value and fall back to C-style prefix parsing
(``strtol`` with base 0, ``strtod``), so hex integers and values with
trailing junk still decode.
"""
from __future__ import annotations

from typing import Iterator, Optional, Tuple

from .utils import parse_float_prefix, parse_int_prefix, wrap_integer


RECORD_SIZE = 80
END_MARKER = b"END "
_FORTRAN_EXPONENT = str.maketrans("Dd", "Ee")


def iter_records(buffer) -> Iterator[Tuple[int, bytes]]:
    """Yield ``(offset, record)`` pairs up to, but not including, the END record.

    Never reads past the end of ``buffer``; the last record may be short.
    """
    data = bytes(buffer)
    for offset in range(0, len(data), RECORD_SIZE):
        record = data[offset:offset + RECORD_SIZE]
        if record.startswith(END_MARKER):
            return
        yield offset, record


def find_end(buffer) -> int:
    """Offset of the END record in ``buffer``, or -1 when there is none."""
    data = bytes(buffer)
    for offset in range(0, len(data), RECORD_SIZE):
        if data[offset:offset + len(END_MARKER)] == END_MARKER:
            return offset
    return -1


def _parse_record_value(record: bytes, key: bytes) -> Optional[str]:
    """Return the value text of ``record`` if it holds ``key``."""
    if not record.startswith(key):
        return None
    rest = record[len(key):]
    if rest and rest[:1] not in (b" ", b"="):
        return None

    text = rest.decode("ascii", errors="replace").lstrip()
    if text.startswith("="):
        text = text[1:].lstrip()

    if text.startswith("'"):
        closing = text.find("'", 1)
        inner = text[1:] if closing < 0 else text[1:closing]
        return inner.strip()

    text = text.split("/", 1)[0].strip()
    return text.split()[0] if text else ""


def find_value(buffer, key: str) -> Optional[str]:
    """Return the raw value text of the first record holding ``key``, or ``None``."""
    key_bytes = key.encode("ascii")
    for _, record in iter_records(buffer):
        value = _parse_record_value(record, key_bytes)
        if value is not None:
            return value
    return None


def _to_integer(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text.translate(_FORTRAN_EXPONENT)))
    except (ValueError, OverflowError):
        return parse_int_prefix(text)


def get_int(buffer, key: str, default: int) -> int:
    """Signed 32-bit value of ``key``, or ``default`` when absent."""
    text = find_value(buffer, key)
    if text is None:
        return default
    return wrap_integer(_to_integer(text), 32, signed=True)


def get_uint(buffer, key: str, default: int) -> int:
    """Unsigned 32-bit value of ``key``, or ``default`` when absent."""
    text = find_value(buffer, key)
    if text is None:
        return default
    return wrap_integer(_to_integer(text), 32, signed=False)


def get_uint64(buffer, key: str, default: int) -> int:
    """Unsigned 64-bit value of ``key``, or ``default`` when absent."""
    text = find_value(buffer, key)
    if text is None:
        return default
    return wrap_integer(_to_integer(text), 64, signed=False)


def get_float(buffer, key: str, default: float) -> float:
    """Floating-point value of ``key``, or ``default`` when absent."""
    text = find_value(buffer, key)
    if text is None:
        return default
    try:
        return float(text.translate(_FORTRAN_EXPONENT))
    except ValueError:
        return parse_float_prefix(text)


def get_str(buffer, key: str, default: str) -> str:
    """String value of ``key`` with quotes removed, or ``default`` when absent."""
    text = find_value(buffer, key)
    if text is None:
        return default
    return text


def header_size(buffer, directio: bool = False, area_size: int = 25600,
                alignment: int = 512) -> int:
    """Size in bytes of the header in ``buffer``, including the END record.

    With ``directio`` set the size is padded so that the data block starts on
    an ``alignment`` boundary counted from the end of the ``area_size`` header
    area. Returns 0 when no END record is found.
    """
    end = find_end(buffer)
    if end < 0:
        return 0
    size = end + RECORD_SIZE
    if directio:
        size += (area_size - size) % alignment
    return size
