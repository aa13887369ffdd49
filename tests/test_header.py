"""Tests for header decoding and geometry validation."""
from __future__ import annotations

import numpy as np
import pytest

from rawvolt.input.header import (
    GeometryError,
    Header,
    HeaderTruncatedError,
    MissingFieldError,
    UnsupportedFormatError,
    decode_header,
    validate_geometry,
)
from conftest import block_fields, make_header


def _decode(fields, **kwargs):
    return decode_header(make_header(fields, directio=kwargs.pop("directio", False)), **kwargs)


def test_decode_basic_fields():
    fields = block_fields(nants=2, nchan=4, ntime=10, npol=2, pktidx=7, BEAM_ID=3)
    header = _decode(fields)

    assert header.blocsize == 2 * 4 * 10 * 2 * 2
    assert header.npol == 2
    assert header.obsnchan == 8
    assert header.nbits == 8
    assert header.nants == 2
    assert header.pktidx == 7
    assert header.obsfreq == 1500.0
    assert header.obsbw == -187.5
    assert header.tbin == pytest.approx(1e-6)
    assert header.beam_id == 3
    assert header.src_name == "J1939+2134"
    assert header.telescop == "MeerKAT"
    assert header.ra == pytest.approx(12.5)
    assert header.dec == pytest.approx(-45.5)
    assert header.mjd == pytest.approx(59000.5)
    assert header.hdr_size == 80 * (len(fields) + 1)
    assert header.padded_hdr_size == header.hdr_size
    assert header.data_offset == header.hdr_size


def test_decode_is_idempotent():
    raw = make_header(block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=1))
    assert decode_header(raw) == decode_header(raw)


def test_defaults_for_optional_fields():
    fields = {
        "BLOCSIZE": 160,
        "NPOL": 2,
        "OBSNCHAN": 4,
        "OBSFREQ": 1400.0,
        "OBSBW": 100.0,
        "TBIN": 1e-5,
        "PKTIDX": 0,
    }
    header = _decode(fields)
    assert header.nbits == 8
    assert header.nants == 1
    assert header.beam_id == -1
    assert header.directio == 0
    assert header.src_name == "Unknown"
    assert header.telescop == "Unknown"
    assert header.ra == 0.0
    assert header.dec == 0.0
    assert header.mjd == 51545.0


@pytest.mark.parametrize("npol", [2, 4])
def test_npol_normalization(npol):
    header = _decode(block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0, NPOL=npol))
    assert header.npol == 2


@pytest.mark.parametrize(
    "key", ["BLOCSIZE", "NPOL", "OBSNCHAN", "OBSFREQ", "OBSBW", "TBIN", "PKTIDX"]
)
def test_missing_required_field(key):
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0)
    del fields[key]
    with pytest.raises(MissingFieldError) as excinfo:
        _decode(fields)
    assert excinfo.value.field_name == key
    assert key in str(excinfo.value)


def test_zero_required_field_counts_as_missing():
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0, OBSFREQ=0.0)
    with pytest.raises(MissingFieldError, match="OBSFREQ"):
        _decode(fields)


def test_directio_padding_and_data_offset():
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0, DIRECTIO=1)
    header = _decode(fields, directio=True, header_offset=4096)
    assert header.padded_hdr_size % 512 == (25600 % 512)
    assert header.padded_hdr_size >= header.hdr_size
    assert header.padded_hdr_size - header.hdr_size < 512
    assert header.data_offset == 4096 + header.padded_hdr_size


def test_header_buffer_excludes_data_bytes():
    raw = make_header(block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0))
    header = decode_header(raw + b"\x7f" * 500)
    assert header.buffer == raw[:header.hdr_size]


def test_truncated_header():
    with pytest.raises(HeaderTruncatedError):
        decode_header(b"NPOL    = 2")


def test_header_without_end_record():
    raw = make_header(block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0))
    with pytest.raises(HeaderTruncatedError, match="END"):
        decode_header(raw[:-80])


def test_decode_from_numpy_buffer_with_byte_count():
    raw = make_header(block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=9))
    area = np.zeros(25600, dtype=np.uint8)
    area[:len(raw)] = np.frombuffer(raw, dtype=np.uint8)
    header = decode_header(area, len(raw))
    assert header.pktidx == 9


def test_geometry_rejects_obsnchan_not_divisible_by_nants():
    header = Header(blocsize=160, npol=2, obsnchan=8, nants=3)
    with pytest.raises(GeometryError, match="8 % 3"):
        validate_geometry(header)


def test_geometry_accepts_antenna_inclusive_obsnchan():
    header = validate_geometry(Header(blocsize=320, npol=2, obsnchan=8, nants=4))
    assert header.num_channels == 2
    assert header.num_timesteps == 10


def test_blocsize_divisibility():
    header = Header(blocsize=160, npol=2, obsnchan=4, nants=1)
    assert header.bytes_per_timestep == 16
    assert validate_geometry(header).num_timesteps == 10

    with pytest.raises(GeometryError, match="not divisible by 16"):
        validate_geometry(Header(blocsize=161, npol=2, obsnchan=4, nants=1))


def test_only_eight_bit_samples_supported():
    with pytest.raises(UnsupportedFormatError):
        validate_geometry(Header(blocsize=160, npol=2, obsnchan=4, nants=1, nbits=4))


def test_band_layout():
    header = validate_geometry(Header(blocsize=2 * 8 * 5 * 2 * 2, npol=2, obsnchan=16, nants=2))
    assert header.num_channels == 8
    band_bytes, preband_bytes = header.band_layout(band=3, num_bands=4)
    assert band_bytes == 2 * 5 * 2 * 2
    assert preband_bytes == 3 * band_bytes

    with pytest.raises(ValueError):
        header.band_layout(band=0, num_bands=3)
    with pytest.raises(ValueError):
        header.band_layout(band=4, num_bands=4)


def test_as_array_shape():
    header = validate_geometry(Header(blocsize=2 * 3 * 4 * 2 * 2, npol=2, obsnchan=6, nants=2))
    data = np.arange(header.blocsize, dtype=np.uint8).astype(np.int8)
    array = header.as_array(data.tobytes())
    assert array.shape == (2, 3, 4, 2, 2)
    assert array[1, 0, 0, 0, 0] == data[3 * 4 * 2 * 2]


def test_block_start_and_mid_time():
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=32)
    header = validate_geometry(_decode(fields))
    # time per packet = tbin * num_timesteps / PIPERBLK
    expected_start = 1600000000 + 32 * (1e-6 * 10 / 16)
    assert header.get_start_time() == pytest.approx(expected_start)
    assert header.get_mid_time() == pytest.approx(expected_start + 1e-6 * 10 / 2)


def test_start_time_requires_synctime():
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=32)
    del fields["SYNCTIME"]
    header = validate_geometry(_decode(fields))
    with pytest.raises(MissingFieldError, match="SYNCTIME"):
        header.get_start_time()


def test_extra_keys_through_header_getters():
    fields = block_fields(nants=1, nchan=4, ntime=10, npol=2, pktidx=0, OBSID="scan-12", CHAN_BW=0.25)
    header = _decode(fields)
    assert header.get_str("OBSID", "") == "scan-12"
    assert header.get_float("CHAN_BW", 0.0) == 0.25
    assert header.get_uint("PIPERBLK", 0) == 16
    assert header.get_int("MISSING", -5) == -5
