"""
Tests for battery device discovery.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest
from battwatch.src.discovery import battery_devices, discover


def _make_provider(listing: str | None) -> AsyncMock:
    provider = AsyncMock()
    provider.list_battery_devices = AsyncMock(return_value=listing)
    return provider


class TestBatteryDevices:
    def test_filters_battery_class(self, enumerate_output: str) -> None:
        assert battery_devices(enumerate_output) == [
            "/org/freedesktop/UPower/devices/battery_BAT0",
            "/org/freedesktop/UPower/devices/battery_BAT1",
        ]

    def test_preserves_provider_order(self) -> None:
        listing = (
            "/org/freedesktop/UPower/devices/battery_BAT1\n"
            "/org/freedesktop/UPower/devices/battery_BAT0\n"
        )
        assert battery_devices(listing)[0].endswith("battery_BAT1")

    def test_ignores_non_battery_devices(self) -> None:
        listing = (
            "/org/freedesktop/UPower/devices/line_power_AC\n"
            "/org/freedesktop/UPower/devices/DisplayDevice\n"
            "/org/freedesktop/UPower/devices/mouse_hidpp_battery_0\n"
        )
        assert battery_devices(listing) == []


class TestDiscover:
    @pytest.mark.asyncio
    async def test_returns_first_battery(self, enumerate_output: str) -> None:
        provider = _make_provider(enumerate_output)
        result = await discover(provider)
        assert result == "/org/freedesktop/UPower/devices/battery_BAT0"
        provider.list_battery_devices.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_battery_returns_none(self) -> None:
        provider = _make_provider("/org/freedesktop/UPower/devices/line_power_AC\n")
        assert await discover(provider) is None

    @pytest.mark.asyncio
    async def test_provider_failure_is_no_battery(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        provider = _make_provider(None)
        with caplog.at_level(logging.WARNING, logger="battwatch.src.discovery"):
            result = await discover(provider)
        assert result is None
        assert "listing unavailable" in caplog.text
