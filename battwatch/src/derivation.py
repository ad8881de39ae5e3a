"""
Metric derivation engine: parsed UPower map -> BatterySnapshot.

Applies the field lookups and fallback rules that turn the normalized
key/value map produced by :mod:`battwatch.src.parser` into a typed snapshot:

1. ``present`` gates everything; an absent battery yields a default snapshot.
2. Level, charging state, voltage and both capacity pairs (Wh and Ah) are
   normalized independently.
3. Power comes only from ``energy-rate``.  Current is derived from power and
   voltage with a forced sign (negative while discharging).  Power is never
   synthesized from charge/current fields.
4. Time remaining prefers the provider's own estimate for the current
   direction, then a computed Wh estimate, then a computed Ah estimate,
   otherwise an explicit "cannot calculate" marker.

This is a pure function: no side effects, no I/O, no clock.  The device_id
and timestamp are accepted as parameters so they can be injected by the caller.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import datetime

from battwatch.src.models import UNKNOWN, BatterySnapshot, Duration, Unknown
from battwatch.src.numeric import to_duration_hours, to_number, to_percent

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Provider tokens and field names (canonical keys, see parser.canonical_key)
# ---------------------------------------------------------------------------

PRESENT_TOKEN = "yes"
CHARGING_TOKEN = "charging"

KEY_PRESENT = "present"
KEY_STATE = "state"
KEY_PERCENTAGE = "percentage"
KEY_ENERGY = "energy"
KEY_ENERGY_FULL = "energy-full"
KEY_ENERGY_FULL_DESIGN = "energy-full-design"
KEY_ENERGY_RATE = "energy-rate"
KEY_CHARGE = "charge"
KEY_CHARGE_FULL = "charge-full"
KEY_VOLTAGE = "voltage"
KEY_TIME_TO_FULL = "time to full"
KEY_TIME_TO_EMPTY = "time to empty"
KEY_TECHNOLOGY = "technology"
KEY_VENDOR = "vendor"
KEY_MODEL = "model"
KEY_NATIVE_PATH = "native-path"

MIN_POWER_W: float = 0.1
"""Below this rate a Wh-based time estimate is considered meaningless."""

MIN_CURRENT_A: float = 0.01
"""Below this current an Ah-based time estimate is considered meaningless."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text(data: dict[str, str], key: str) -> str:
    """Return a metadata value, or UNKNOWN when missing or blank."""
    value = data.get(key, "").strip()
    return value or UNKNOWN


def derive_current(power_w: float, voltage_v: float, *, charging: bool) -> float:
    """Derive signed current from power and voltage.

    The provider does not report current directly, so the sign is forced:
    positive while charging, negative otherwise.  Returns 0 when the
    voltage is not positive.
    """
    if voltage_v <= 0:
        return 0.0
    magnitude = abs(power_w / voltage_v)
    return magnitude if charging else -magnitude


def estimate_hours(
    *,
    charging: bool,
    power_w: float,
    current_a: float,
    energy_now_wh: float,
    energy_full_wh: float,
    charge_now_ah: float,
    charge_full_ah: float,
) -> float | None:
    """Compute hours to full (charging) or to empty (discharging).

    Uses the Wh pair when the power rate is meaningful and the provider
    reported energy for this direction, otherwise the Ah pair when the
    current is meaningful.

    Returns:
        The estimate in hours, or ``None`` if it cannot be calculated or
        comes out non-positive.
    """
    has_energy = energy_full_wh > 0 if charging else energy_now_wh > 0
    if power_w > MIN_POWER_W and has_energy:
        remaining = energy_full_wh - energy_now_wh if charging else energy_now_wh
        hours = remaining / power_w
    elif abs(current_a) > MIN_CURRENT_A:
        remaining = charge_full_ah - charge_now_ah if charging else charge_now_ah
        hours = remaining / abs(current_a)
    else:
        return None

    if hours <= 0:
        return None
    return hours


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def derive(
    data: dict[str, str],
    *,
    device_id: str | None = None,
    ts: datetime | None = None,
) -> BatterySnapshot:
    """Build a BatterySnapshot from a parsed UPower key/value map.

    Every step degrades to a neutral default instead of raising; the worst
    outcome is an "Unknown" or "cannot calculate" field.

    Args:
        data: Mapping produced by :func:`battwatch.src.parser.parse`.
        device_id: Provider object path to embed.  Falls back to the
            ``native-path`` field, then ``"Unknown"``.
        ts: Acquisition timestamp to embed.

    Returns:
        The derived snapshot.  When ``present`` is missing or not ``"yes"``
        the snapshot has ``present=False`` and every other field at its
        default.
    """
    resolved_id = device_id or _text(data, KEY_NATIVE_PATH)

    if data.get(KEY_PRESENT, "").casefold() != PRESENT_TOKEN:
        logger.debug("Device %s not present", resolved_id)
        return BatterySnapshot(present=False, device_id=resolved_id, ts=ts)

    state = data.get(KEY_STATE, "").casefold() or "unknown"
    charging = state == CHARGING_TOKEN
    level = to_percent(data.get(KEY_PERCENTAGE))

    energy_now = to_number(data.get(KEY_ENERGY))
    energy_full = to_number(data.get(KEY_ENERGY_FULL))
    energy_full_design = to_number(data.get(KEY_ENERGY_FULL_DESIGN))
    charge_now = to_number(data.get(KEY_CHARGE))
    charge_full = to_number(data.get(KEY_CHARGE_FULL))

    voltage = to_number(data.get(KEY_VOLTAGE))

    # --- Power / current ---
    if KEY_ENERGY_RATE in data:
        power = to_number(data[KEY_ENERGY_RATE])
        current = derive_current(power, voltage, charging=charging)
    else:
        power = 0.0
        current = 0.0

    # --- Time remaining ---
    time_key = KEY_TIME_TO_FULL if charging else KEY_TIME_TO_EMPTY
    hours = to_duration_hours(data.get(time_key))
    if hours is None:
        hours = estimate_hours(
            charging=charging,
            power_w=power,
            current_a=current,
            energy_now_wh=energy_now,
            energy_full_wh=energy_full,
            charge_now_ah=charge_now,
            charge_full_ah=charge_full,
        )
    if hours is not None:
        time_remaining: Duration | Unknown = Duration(hours=hours)
    else:
        time_remaining = Unknown(reason="cannot_calculate")

    return BatterySnapshot(
        present=True,
        level_percent=level,
        charging=charging,
        state=state,
        current_a=current,
        voltage_v=voltage,
        power_w=power,
        charge_now_ah=charge_now,
        charge_full_ah=charge_full,
        energy_now_wh=energy_now,
        energy_full_wh=energy_full,
        energy_full_design_wh=energy_full_design,
        time_remaining=time_remaining,
        technology=_text(data, KEY_TECHNOLOGY),
        vendor=_text(data, KEY_VENDOR),
        model=_text(data, KEY_MODEL),
        device_id=resolved_id,
        ts=ts,
    )
