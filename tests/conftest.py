"""Shared helpers for building synthetic .raw recordings."""
from __future__ import annotations

import numpy as np
import pytest

RECORD = 80
HEADER_AREA = 25600
ALIGNMENT = 512


def make_header(fields: dict, directio: bool = False) -> bytes:
    """Encode ``fields`` as 80-byte records followed by END and optional padding."""
    records = []
    for key, value in fields.items():
        if isinstance(value, str):
            text = f"'{value}'"
        else:
            text = repr(value)
        records.append(f"{key:<8}= {text}".ljust(RECORD).encode("ascii"))
    records.append(b"END".ljust(RECORD))
    header = b"".join(records)
    if directio:
        header += b" " * ((HEADER_AREA - len(header)) % ALIGNMENT)
    return header


def make_block(nants: int, nchan: int, ntime: int, npol: int, seed: int) -> np.ndarray:
    """Random int8 payload shaped ``(antenna, channel, timestep, pol, re/im)``."""
    np.random.seed(seed)
    return np.random.randint(-128, 128, size=(nants, nchan, ntime, npol, 2)).astype(np.int8)


def block_fields(nants: int, nchan: int, ntime: int, npol: int, pktidx: int, **extra) -> dict:
    """Header fields describing a block of the given geometry."""
    fields = {
        "BLOCSIZE": nants * nchan * ntime * npol * 2,
        "NPOL": npol,
        "OBSNCHAN": nants * nchan,
        "NBITS": 8,
        "NANTS": nants,
        "OBSFREQ": 1500.0,
        "OBSBW": -187.5,
        "TBIN": 1e-6,
        "PKTIDX": pktidx,
        "RA_STR": "12:30:00.0",
        "DEC_STR": "-45:30:00.0",
        "STT_IMJD": 59000,
        "STT_SMJD": 43200,
        "SRC_NAME": "J1939+2134",
        "TELESCOP": "MeerKAT",
        "SYNCTIME": 1600000000,
        "PIPERBLK": 16,
    }
    fields.update(extra)
    return fields


@pytest.fixture
def write_raw(tmp_path):
    """Factory writing ``[(fields, payload_bytes), ...]`` to a .raw file."""
    counter = {"n": 0}

    def _write(blocks, directio: bool = False, name: str = None):
        counter["n"] += 1
        path = tmp_path / (name or f"recording_{counter['n']}.0000.raw")
        with open(path, "wb") as f:
            for fields, payload in blocks:
                f.write(make_header(fields, directio=directio or bool(fields.get("DIRECTIO"))))
                f.write(bytes(payload))
        return path

    return _write


@pytest.fixture
def three_block_file(write_raw):
    """Recording with three 3-antenna blocks and consecutive PKTIDX values."""
    nants, nchan, ntime, npol = 3, 4, 5, 2
    blocks = [make_block(nants, nchan, ntime, npol, seed) for seed in (1, 2, 3)]
    entries = [
        (block_fields(nants, nchan, ntime, npol, pktidx=100 + i), block.tobytes())
        for i, block in enumerate(blocks)
    ]
    return write_raw(entries), blocks
