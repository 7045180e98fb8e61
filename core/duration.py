"""
Parsing of human-friendly pause durations.
"""

from __future__ import annotations

import re
import sys
from typing import Optional

MINUTE_MS = 60000
HOUR_MS = 60 * MINUTE_MS
INVALID_DURATION = -1
_MAX_FINITE_MS = int(sys.float_info.max)
# Longer digit runs cannot produce a finite total.
_MAX_DIGITS = len(str(_MAX_FINITE_MS))

_MINUTES_ONLY = re.compile(r"\d+", re.ASCII)
_HOURS_MINUTES = re.compile(r"(?:(\d+)h)?(?:(\d+)m)?", re.ASCII)


def parse_duration(text: str) -> int:
    """
    Convert ``text`` into milliseconds.

    A bare number is read as minutes. Otherwise ``<H>h<M>m``, ``<H>h`` and
    ``<M>m`` are accepted, case-insensitively. Returns ``INVALID_DURATION``
    when nothing recognisable is found or the total is out of range.
    """
    if _MINUTES_ONLY.fullmatch(text):
        return _finite(_to_int(text), MINUTE_MS)

    result = _HOURS_MINUTES.match(text.lower())
    if result is None or result.group(0) == "":
        return INVALID_DURATION

    hours = _to_int(result.group(1) or "0")
    minutes = _to_int(result.group(2) or "0")
    if hours is None or minutes is None:
        return INVALID_DURATION
    return _finite(hours * HOUR_MS + minutes * MINUTE_MS)


def _to_int(digits: str) -> Optional[int]:
    significant = digits.lstrip("0") or "0"
    if len(significant) > _MAX_DIGITS:
        return None
    return int(significant)


def _finite(value: Optional[int], scale: int = 1) -> int:
    if value is None or value * scale > _MAX_FINITE_MS:
        return INVALID_DURATION
    return value * scale
