"""Text helpers for turning SDMX attribute data into record fields.

Attribute ids in the service's XML are upper snake case (``TIME_FORMAT``,
``UNIT_MULT``) and become lower camel case keys in the output records
(``timeFormat``, ``unitMult``).  Numeric observation values are parsed
leniently: a leading number is accepted, anything else becomes ``NaN``.
"""

from __future__ import annotations

import math
import re

_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_LEADING_NUMBER = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def to_camel_case(name: str) -> str:
    """Normalize an attribute id to a lower camel case key.

    >>> to_camel_case("TIME_FORMAT")
    'timeFormat'
    >>> to_camel_case("obs-status")
    'obsStatus'
    """
    spaced = _CASE_BOUNDARY.sub(r"\1 \2", name)
    words = [w.lower() for w in _NON_ALNUM.split(spaced) if w]
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


def parse_float(text: str | None) -> float:
    """Parse the numeric prefix of *text*, returning ``NaN`` when there is none.

    Mirrors the leniency of a browser ``parseFloat``: ``"1.25 "`` and
    ``"1.25abc"`` both give ``1.25``; ``""``, ``None`` and ``"n/a"`` give
    ``NaN``.
    """
    if not text:
        return math.nan
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return math.nan
    token = match.group(1)
    if token.endswith("Infinity"):
        return -math.inf if token.startswith("-") else math.inf
    return float(token)
