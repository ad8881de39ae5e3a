"""
Pydantic models for normalized battery snapshots.

Defines the immutable BatterySnapshot that represents one fully-derived
battery state, plus the tagged TimeRemaining union (a concrete Duration or an
explicit Unknown marker).  Snapshots are frozen: each poll cycle builds a new
one and the store swaps it in wholesale.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

UNKNOWN = "Unknown"
"""Default for metadata fields the provider did not report."""


class Duration(BaseModel):
    """A concrete remaining time, in hours."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["duration"] = "duration"
    hours: float = Field(ge=0)


class Unknown(BaseModel):
    """Remaining time that is not available.

    Attributes:
        reason: ``"unknown"`` when nothing has been derived yet (or the
            battery is absent), ``"cannot_calculate"`` when data was present
            but neither a provider estimate nor a usable rate existed.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"
    reason: Literal["unknown", "cannot_calculate"] = "unknown"


TimeRemaining = Annotated[Duration | Unknown, Field(discriminator="kind")]


class BatterySnapshot(BaseModel):
    """A single normalized battery reading.

    All numeric values are in SI-ish display units (V, A, W, Wh, Ah) and
    default to 0 when the provider omitted them or sent something
    unparseable.  ``ts`` is injected by the caller so that derivation stays
    a pure function.

    Attributes:
        present: Whether a battery was physically detected.
        level_percent: 0-100, or -1 when unknown.
        charging: True while the provider reports the ``charging`` state.
        state: Raw provider state token (``"discharging"``,
            ``"fully-charged"``, ...).
        current_a: Signed current.  Positive = charging, negative =
            discharging.  Derived from power and voltage, not measured.
        voltage_v: Battery voltage.
        power_w: Magnitude of the instantaneous power flow.
        charge_now_ah: Remaining charge (legacy unit).
        charge_full_ah: Full charge (legacy unit).
        energy_now_wh: Remaining energy (preferred unit).
        energy_full_wh: Energy when full.
        energy_full_design_wh: Design energy when full.
        time_remaining: Duration to full/empty, or an Unknown marker.
        technology: Cell chemistry, e.g. ``"lithium-ion"``.
        vendor: Battery vendor.
        model: Battery model name.
        device_id: Provider object path of the device.
        ts: Time the raw data was acquired.
    """

    model_config = ConfigDict(frozen=True)

    present: bool = False
    level_percent: int = Field(default=-1, ge=-1, le=100)
    charging: bool = False
    state: str = "unknown"
    current_a: float = 0.0
    voltage_v: float = Field(default=0.0, ge=0)
    power_w: float = Field(default=0.0, ge=0)
    charge_now_ah: float = Field(default=0.0, ge=0)
    charge_full_ah: float = Field(default=0.0, ge=0)
    energy_now_wh: float = Field(default=0.0, ge=0)
    energy_full_wh: float = Field(default=0.0, ge=0)
    energy_full_design_wh: float = Field(default=0.0, ge=0)
    time_remaining: TimeRemaining = Field(default_factory=Unknown)
    technology: str = UNKNOWN
    vendor: str = UNKNOWN
    model: str = UNKNOWN
    device_id: str = UNKNOWN
    ts: datetime | None = None

    @field_validator(
        "current_a",
        "voltage_v",
        "power_w",
        "charge_now_ah",
        "charge_full_ah",
        "energy_now_wh",
        "energy_full_wh",
        "energy_full_design_wh",
        mode="before",
    )
    @classmethod
    def _finite_or_zero(cls, v: object) -> object:
        """Replace NaN/inf with 0 so snapshots never carry non-finite numbers."""
        if isinstance(v, float) and not math.isfinite(v):
            return 0.0
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def capacity_percent(self) -> float:
        """Current fill ratio, preferring Wh over Ah."""
        if self.energy_full_wh > 0:
            return min(self.energy_now_wh / self.energy_full_wh * 100.0, 100.0)
        if self.charge_full_ah > 0:
            return min(self.charge_now_ah / self.charge_full_ah * 100.0, 100.0)
        return 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def health_percent(self) -> float:
        """Full capacity relative to design capacity (Wh only)."""
        if self.energy_full_design_wh > 0:
            return self.energy_full_wh / self.energy_full_design_wh * 100.0
        return 0.0
