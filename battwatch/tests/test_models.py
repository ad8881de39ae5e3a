"""
Tests for the BatterySnapshot model and the TimeRemaining tagged union.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math

import pytest
from battwatch.src.models import BatterySnapshot, Duration, Unknown
from pydantic import BaseModel, ValidationError


class TestDefaults:
    def test_default_snapshot(self) -> None:
        snapshot = BatterySnapshot()
        assert snapshot.present is False
        assert snapshot.level_percent == -1
        assert snapshot.power_w == 0.0
        assert snapshot.time_remaining == Unknown(reason="unknown")
        assert snapshot.technology == "Unknown"
        assert snapshot.capacity_percent == 0.0
        assert snapshot.health_percent == 0.0

    def test_is_pydantic_model(self) -> None:
        assert issubclass(BatterySnapshot, BaseModel)


class TestValidation:
    def test_non_finite_numbers_become_zero(self) -> None:
        snapshot = BatterySnapshot(power_w=math.nan, current_a=math.inf)
        assert snapshot.power_w == 0.0
        assert snapshot.current_a == 0.0

    @pytest.mark.parametrize("level", [-2, 101])
    def test_level_out_of_range_rejected(self, level: int) -> None:
        with pytest.raises(ValidationError):
            BatterySnapshot(level_percent=level)

    def test_negative_power_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BatterySnapshot(power_w=-1.0)

    def test_negative_current_allowed(self) -> None:
        assert BatterySnapshot(current_a=-1.5).current_a == -1.5


class TestTimeRemainingUnion:
    def test_duration_from_json(self) -> None:
        snapshot = BatterySnapshot.model_validate(
            {"time_remaining": {"kind": "duration", "hours": 2.5}}
        )
        assert snapshot.time_remaining == Duration(hours=2.5)

    def test_unknown_from_json(self) -> None:
        snapshot = BatterySnapshot.model_validate(
            {"time_remaining": {"kind": "unknown", "reason": "cannot_calculate"}}
        )
        assert snapshot.time_remaining == Unknown(reason="cannot_calculate")

    def test_round_trip_through_json(self) -> None:
        snapshot = BatterySnapshot(present=True, level_percent=42, time_remaining=Duration(hours=1.0))
        restored = BatterySnapshot.model_validate_json(snapshot.model_dump_json())
        assert restored == snapshot

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Duration(hours=-1.0)


class TestComputedRatios:
    def test_capacity_clamped_to_100(self) -> None:
        snapshot = BatterySnapshot(energy_now_wh=60.0, energy_full_wh=55.0)
        assert snapshot.capacity_percent == 100.0

    def test_health_can_exceed_100(self) -> None:
        """New packs sometimes report more than their design capacity."""
        snapshot = BatterySnapshot(energy_full_wh=60.0, energy_full_design_wh=57.0)
        assert snapshot.health_percent == pytest.approx(60.0 / 57.0 * 100)
