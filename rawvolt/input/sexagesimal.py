# This module converts sexagesimal coordinate strings.

"""Convert ``[sign]D:M:S`` strings (RA_STR, DEC_STR) to decimal values."""
from __future__ import annotations

from .utils import parse_float_prefix


def sexagesimal_to_decimal(text: str) -> float:
    """Return ``sign * (d + m / 60 + s / 3600)`` for a ``[+|-]D:M:S`` string.

    Minutes and seconds are optional and count as zero when absent; a string
    with no ``:`` is read as a plain decimal. Empty fields between colons are
    skipped, and fields beyond the third are ignored.

    >>> sexagesimal_to_decimal("12:30:00")
    12.5
    >>> sexagesimal_to_decimal("-45:30:00")
    -45.5
    """
    text = text.strip()
    sign = 1.0
    if text.startswith("-"):
        sign = -1.0
        text = text[1:]
    elif text.startswith("+"):
        text = text[1:]

    tokens = [token for token in text.split(":") if token]
    if not tokens:
        return sign * parse_float_prefix(text)

    value = 0.0
    for scale, token in zip((1.0, 60.0, 3600.0), tokens):
        value += parse_float_prefix(token) / scale
    return sign * value
