"""
Locale-tolerant numeric normalization for UPower field values.

UPower prints values for humans: units are appended (``"55.0 Wh"``,
``"12.3 V"``, ``"87%"``) and the decimal separator follows the user's locale
(``"4,5 Wh"`` under de_DE).  These helpers turn such strings into plain
numbers and never raise: any parse failure degrades to a neutral default.

- to_number(raw): float, 0.0 on failure.
- to_percent(raw): int in [0, 100], UNKNOWN_PERCENT (-1) on failure.
- to_duration_hours(raw): hours as float, None when not a usable duration.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
import re

UNKNOWN_PERCENT: int = -1
"""Sentinel for a percentage that could not be determined (distinct from 0)."""

_NON_NUMERIC_RE = re.compile(r"[^0-9,.]")

_DURATION_RE = re.compile(r"^\s*([0-9][0-9.,]*)\s*([A-Za-z]+)")

_UNIT_HOURS: dict[str, float] = {
    "second": 1.0 / 3600.0,
    "seconds": 1.0 / 3600.0,
    "minute": 1.0 / 60.0,
    "minutes": 1.0 / 60.0,
    "hour": 1.0,
    "hours": 1.0,
    "day": 24.0,
    "days": 24.0,
}
"""UPower duration unit words -> multiplier to hours."""


def _clean(raw: str | None) -> str:
    """Keep only digits, commas and periods, then map comma to period."""
    if not raw:
        return ""
    return _NON_NUMERIC_RE.sub("", raw).replace(",", ".")


def to_number(raw: str | None) -> float:
    """Convert a UPower value string to a float.

    Every character that is not a digit, comma or period is dropped (units,
    whitespace, signs) and the comma is treated as a decimal separator, so
    ``"4,500 Wh"`` and ``"4.500 Wh"`` both yield ``4.5``.

    Args:
        raw: The raw field value, or ``None`` when the field is absent.

    Returns:
        The parsed value, or ``0.0`` when nothing parseable remains or the
        result is not finite.
    """
    cleaned = _clean(raw)
    if not cleaned:
        return 0.0
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def to_percent(raw: str | None) -> int:
    """Convert a UPower percentage string (``"55%"``) to an integer.

    A trailing ``%`` is removed before parsing; fractional values are
    truncated.  Anything unparseable or outside 0-100 maps to
    :data:`UNKNOWN_PERCENT`.
    """
    if raw is None:
        return UNKNOWN_PERCENT
    cleaned = _clean(raw.strip().rstrip("%"))
    if not cleaned:
        return UNKNOWN_PERCENT
    try:
        value = float(cleaned)
    except ValueError:
        return UNKNOWN_PERCENT
    if not math.isfinite(value):
        return UNKNOWN_PERCENT
    percent = int(value)
    if percent < 0 or percent > 100:
        return UNKNOWN_PERCENT
    return percent


def to_duration_hours(raw: str | None) -> float | None:
    """Parse a UPower duration (``"3.3 hours"``, ``"45,2 minutes"``) into hours.

    Returns:
        The duration in hours, or ``None`` if the unit is not recognised or
        the value is not strictly positive.
    """
    if not raw:
        return None
    match = _DURATION_RE.match(raw)
    if match is None:
        return None
    multiplier = _UNIT_HOURS.get(match.group(2).lower())
    if multiplier is None:
        return None
    value = to_number(match.group(1))
    if value <= 0:
        return None
    return value * multiplier
