"""
Presentation-boundary formatting for published battery state.

Snapshots carry numbers and tagged values only; this module turns them into
the strings display consumers show: a remaining-time label, an icon name
bucketed by level, a short title, and a multi-line detail block.

All truncation uses floor, never rounding, so remaining time is never
overstated.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math

from battwatch.src.models import BatterySnapshot, Duration, Unknown

_FLOOR_EPSILON = 1e-6

_UNKNOWN_LABELS: dict[str, str] = {
    "unknown": "Unknown",
    "cannot_calculate": "Cannot calculate",
}


def format_duration(hours: float) -> str:
    """Format a duration in hours for display.

    Examples: ``0.005 -> "<1 min"``, ``1.5 -> "1h 30min"``,
    ``30 -> "1d 6h"``, ``0.5 -> "30 min"``.
    """
    if hours < 0.01:
        return "<1 min"
    # Floor on whole minutes; the epsilon absorbs binary float error
    # (3.3 h must give 198 min, not 197).
    total_minutes = math.floor(hours * 60 + _FLOOR_EPSILON)
    if hours >= 24:
        days, rest = divmod(total_minutes // 60, 24)
        return f"{days}d {rest}h"
    if hours >= 1:
        whole, minutes = divmod(total_minutes, 60)
        return f"{whole}h {minutes}min"
    return f"{total_minutes} min"


def format_time_remaining(time_remaining: Duration | Unknown) -> str:
    """Render a tagged remaining time."""
    if isinstance(time_remaining, Duration):
        return format_duration(time_remaining.hours)
    return _UNKNOWN_LABELS[time_remaining.reason]


def level_bucket(level_percent: int) -> str | None:
    """Bucket a level into a zero-padded multiple of ten.

    Buckets are inclusive at their upper edge: 20 -> ``"020"``,
    21 -> ``"030"``.  Returns ``None`` for the unknown sentinel.
    """
    if level_percent < 0:
        return None
    bucket = min(math.ceil(level_percent / 10) * 10, 100)
    return f"{bucket:03d}"


def icon_name(snapshot: BatterySnapshot) -> str:
    """Return a freedesktop-style icon name for the snapshot."""
    if not snapshot.present:
        return "battery-missing"
    bucket = level_bucket(snapshot.level_percent)
    if bucket is None:
        return "battery-missing"
    suffix = "-charging" if snapshot.charging else ""
    return f"battery-{bucket}{suffix}"


def format_title(
    snapshot: BatterySnapshot,
    *,
    show_percentage: bool = True,
    show_time: bool = False,
) -> str:
    """Build the short title line, e.g. ``"55% · 3h 20min"``."""
    if not snapshot.present:
        return "No battery"

    parts: list[str] = []
    if show_percentage:
        if snapshot.level_percent < 0:
            parts.append("?%")
        else:
            parts.append(f"{snapshot.level_percent}%")
    if show_time:
        parts.append(format_time_remaining(snapshot.time_remaining))
    if not parts:
        return "Battery"
    return " · ".join(parts)


def format_detail(snapshot: BatterySnapshot) -> str:
    """Build the multi-line detail text shown in expanded views."""
    if not snapshot.present:
        return "No battery detected"

    if snapshot.charging:
        time_label = "Time to full"
    else:
        time_label = "Time to empty"

    lines = [
        f"State: {snapshot.state}",
        f"{time_label}: {format_time_remaining(snapshot.time_remaining)}",
        f"Power: {snapshot.power_w:.2f} W",
        f"Current: {snapshot.current_a:+.2f} A",
        f"Voltage: {snapshot.voltage_v:.2f} V",
    ]
    if snapshot.energy_full_wh > 0:
        lines.append(
            f"Energy: {snapshot.energy_now_wh:.1f} / {snapshot.energy_full_wh:.1f} Wh"
        )
    if snapshot.charge_full_ah > 0:
        lines.append(
            f"Charge: {snapshot.charge_now_ah:.2f} / {snapshot.charge_full_ah:.2f} Ah"
        )
    if snapshot.health_percent > 0:
        lines.append(f"Health: {snapshot.health_percent:.0f}%")
    lines.append(f"Technology: {snapshot.technology}")
    lines.append(f"Vendor: {snapshot.vendor}")
    lines.append(f"Model: {snapshot.model}")
    return "\n".join(lines)


def published_state(
    snapshot: BatterySnapshot,
    *,
    show_percentage: bool = True,
    show_time: bool = False,
) -> dict:
    """Serialise a snapshot together with its formatted boundary strings.

    This is the payload shape shared by the state file and the HTTP API.
    """
    return {
        "snapshot": snapshot.model_dump(mode="json"),
        "title": format_title(
            snapshot, show_percentage=show_percentage, show_time=show_time
        ),
        "detail": format_detail(snapshot),
        "icon": icon_name(snapshot),
        "time_remaining": format_time_remaining(snapshot.time_remaining),
    }
