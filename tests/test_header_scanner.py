"""Tests for the 80-byte header record scanner."""
from __future__ import annotations

import pytest

from rawvolt.input import header_scanner as scanner
from rawvolt.input.utils import parse_float_prefix, parse_int_prefix, wrap_integer


def _records(*lines: str) -> bytes:
    return b"".join(line.ljust(80).encode("ascii") for line in lines)


def test_find_value_forms():
    """Both ``KEY = value`` and ``KEY value`` records are recognised."""
    buf = _records("NPOL    = 4", "OBSNCHAN 64", "SRC_NAME= 'B0329+54  '", "END")
    assert scanner.find_value(buf, "NPOL") == "4"
    assert scanner.find_value(buf, "OBSNCHAN") == "64"
    assert scanner.find_value(buf, "SRC_NAME") == "B0329+54"


def test_key_prefix_does_not_match_longer_key():
    """``NPOL`` must not match a record for ``NPOLX``."""
    buf = _records("NPOLX   = 7", "NPOL    = 2", "END")
    assert scanner.get_int(buf, "NPOL", 0) == 2


def test_comment_after_value_is_ignored():
    buf = _records("BLOCSIZE= 1024 / bytes per block", "END")
    assert scanner.get_int(buf, "BLOCSIZE", 0) == 1024


def test_absent_key_returns_default():
    buf = _records("NPOL    = 2", "END")
    assert scanner.get_int(buf, "NBITS", 8) == 8
    assert scanner.get_float(buf, "OBSFREQ", 0.0) == 0.0
    assert scanner.get_str(buf, "TELESCOP", "Unknown") == "Unknown"
    assert scanner.get_uint64(buf, "PKTIDX", -1) == -1


def test_scan_stops_at_end_record():
    """Records after END belong to the data block and are never matched."""
    buf = _records("NPOL    = 2", "END", "NBITS   = 4")
    assert scanner.get_int(buf, "NBITS", 8) == 8


def test_numeric_fallback_forms():
    """Quoted, hex, float and junk-suffixed numbers decode like their C counterparts."""
    buf = _records(
        "BLOCSIZE= '2048'",
        "NANTS   = 0x10",
        "BEAM_ID = 3.0",
        "STT_SMJD= 12abc",
        "TBIN    = 1.5D-06",
        "OBSBW   = 187.5MHz",
        "END",
    )
    assert scanner.get_int(buf, "BLOCSIZE", 0) == 2048
    assert scanner.get_uint(buf, "NANTS", 1) == 16
    assert scanner.get_int(buf, "BEAM_ID", -1) == 3
    assert scanner.get_int(buf, "STT_SMJD", 0) == 12
    assert scanner.get_float(buf, "TBIN", 0.0) == pytest.approx(1.5e-6)
    assert scanner.get_float(buf, "OBSBW", 0.0) == 187.5


def test_uint64_holds_large_pktidx():
    buf = _records("PKTIDX  = 123456789012345", "END")
    assert scanner.get_uint64(buf, "PKTIDX", -1) == 123456789012345


def test_header_size_unpadded_and_directio():
    """Unpadded size ends after END; direct I/O pads to the 512-byte grid of the header area."""
    buf = _records("NPOL    = 2", "NBITS   = 8", "END") + b"\x00" * 1000
    assert scanner.header_size(buf) == 240
    # (25600 - 240) % 512 == 272
    assert scanner.header_size(buf, directio=True) == 512


def test_header_size_without_end_record():
    buf = _records("NPOL    = 2")
    assert scanner.header_size(buf) == 0
    assert scanner.find_end(buf) == -1


def test_parse_int_prefix_matches_strtol():
    assert parse_int_prefix("42") == 42
    assert parse_int_prefix("-17xyz") == -17
    assert parse_int_prefix("0x1F") == 31
    assert parse_int_prefix("010") == 8
    assert parse_int_prefix("abc") == 0


def test_parse_float_prefix_matches_strtod():
    assert parse_float_prefix("3.25e2 rest") == 325.0
    assert parse_float_prefix(".5") == 0.5
    assert parse_float_prefix("none") == 0.0


def test_wrap_integer():
    assert wrap_integer(-1, 32, signed=False) == 2 ** 32 - 1
    assert wrap_integer(2 ** 64 - 1, 64, signed=True) == -1
    assert wrap_integer(5, 32, signed=True) == 5
