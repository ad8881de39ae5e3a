"""
Shared test fixtures for battery daemon tests.

Provides sample UPower output and environment isolation for
BattwatchSettings.  All BATTWATCH_* env vars are cleaned before each test.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import pytest

# All BattwatchSettings environment variable names, used for cleanup.
_ALL_ENV_VARS = (
    "BATTWATCH_POLL_INTERVAL_S",
    "BATTWATCH_UPOWER_PATH",
    "BATTWATCH_PROVIDER_TIMEOUT_S",
    "BATTWATCH_DEVICE_ID",
    "BATTWATCH_REDISCOVER_AFTER_FAILURES",
    "BATTWATCH_STATE_FILE",
    "BATTWATCH_SHOW_PERCENTAGE",
    "BATTWATCH_SHOW_TIME",
    "BATTWATCH_API_ENABLED",
    "BATTWATCH_API_HOST",
    "BATTWATCH_API_PORT",
    "BATTWATCH_LOG_LEVEL",
)

ENUMERATE_OUTPUT = """\
/org/freedesktop/UPower/devices/line_power_AC
/org/freedesktop/UPower/devices/battery_BAT0
/org/freedesktop/UPower/devices/battery_BAT1
/org/freedesktop/UPower/devices/DisplayDevice
"""

DISCHARGING_OUTPUT = """\
  native-path:          BAT0
  vendor:               SMP
  model:                5B10W13930
  serial:               1234
  power supply:         yes
  updated:              Mon 19 Oct 2026 10:00:00 AM CEST (12 seconds ago)
  has history:          yes
  has statistics:       yes
  battery
    present:             yes
    rechargeable:        yes
    state:               discharging
    warning-level:       none
    energy:              30,0 Wh
    energy-empty:        0 Wh
    energy-full:         55,0 Wh
    energy-full-design:  57,0 Wh
    energy-rate:         9,0 W
    voltage:             11,4 V
    charge-cycles:       120
    time to empty:       3,3 hours
    percentage:          55%
    capacity:            96,4912%
    technology:          lithium-polymer
    icon-name:          'battery-good-symbolic'
"""

CHARGING_OUTPUT = """\
  native-path:          BAT0
  vendor:               SMP
  model:                5B10W13930
  battery
    present:             yes
    state:               charging
    energy:              44.0 Wh
    energy-full:         55.0 Wh
    energy-full-design:  57.0 Wh
    energy-rate:         22.0 W
    voltage:             12.5 V
    time to full:        30.0 minutes
    percentage:          80%
    technology:          lithium-ion
"""

ABSENT_OUTPUT = """\
  native-path:          BAT1
  battery
    present:             no
    state:               unknown
    percentage:          0%
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all BATTWATCH_* env vars and isolate from .env files.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def discharging_output() -> str:
    return DISCHARGING_OUTPUT


@pytest.fixture()
def charging_output() -> str:
    return CHARGING_OUTPUT


@pytest.fixture()
def enumerate_output() -> str:
    return ENUMERATE_OUTPUT


@pytest.fixture()
def absent_output() -> str:
    return ABSENT_OUTPUT
