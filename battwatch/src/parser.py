"""
Key-value parser for ``upower --show-info`` text dumps.

Turns lines such as::

      native-path:          BAT0
      Energy-Full:          55,0 Wh
      time to empty:        3.3 hours

into ``{"native-path": "BAT0", "energy-full": "55,0 Wh",
"time to empty": "3.3 hours"}``.  Keys are case-folded and their internal
whitespace collapsed so that provider output with inconsistent casing or
spacing maps onto the fixed lookup keys used by the derivation engine.

This is a pure function: no side effects, no I/O.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

SEPARATOR = ":"


def canonical_key(key: str) -> str:
    """Case-fold *key* and collapse whitespace runs to single spaces."""
    return " ".join(key.casefold().split())


def parse(raw_text: str) -> dict[str, str]:
    """Parse a multi-line ``key: value`` dump into a normalized mapping.

    Each line is split once at the first separator.  Lines without a
    separator, or whose key is empty after canonicalisation, are skipped.
    When a key repeats, the last occurrence wins.

    Args:
        raw_text: Provider output. May be empty.

    Returns:
        The normalized mapping.  Empty or whitespace-only input yields an
        empty dict, which callers treat as "no data" rather than an error.
    """
    data: dict[str, str] = {}
    if not raw_text or not raw_text.strip():
        return data

    for line in raw_text.splitlines():
        if SEPARATOR not in line:
            continue
        key, value = line.split(SEPARATOR, 1)
        key = canonical_key(key)
        if not key:
            continue
        data[key] = value.strip()
    return data
