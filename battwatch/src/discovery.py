"""
Battery device discovery.

Asks the data provider for its device list and picks the first battery-class
entry, in the order the provider returned them (no reordering or scoring).
A provider failure is indistinguishable from "no battery": both yield None.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from battwatch.src.provider import DataProvider

logger = logging.getLogger(__name__)

BATTERY_PREFIX = "battery_"
"""Last path segment prefix UPower uses for battery-class devices."""


def battery_devices(listing: str) -> list[str]:
    """Filter a device listing down to battery-class object paths."""
    devices: list[str] = []
    for line in listing.splitlines():
        path = line.strip()
        if path.rsplit("/", 1)[-1].startswith(BATTERY_PREFIX):
            devices.append(path)
    return devices


async def discover(provider: DataProvider) -> str | None:
    """Return the first battery device id reported by *provider*, or None."""
    listing = await provider.list_battery_devices()
    if listing is None:
        logger.warning("Device listing unavailable, treating as no battery")
        return None

    devices = battery_devices(listing)
    if not devices:
        logger.info("No battery device found")
        return None

    logger.info("Discovered battery device %s (%d candidate(s))", devices[0], len(devices))
    return devices[0]
