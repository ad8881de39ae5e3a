"""
Async UPower data provider.

Runs the ``upower`` command line to list power devices and dump a single
device's properties as raw text.  Designed to be robust:

- Every call is bounded by a timeout; a hung child process is killed.
- Non-zero exit status, empty output, a missing binary or any other error
  is logged as a warning and reported as ``None`` ("no data this cycle").
- Never raises to the caller.

Operations:
- list_battery_devices(): ``upower --enumerate``, one object path per line.
- query_device(device_id): ``upower --show-info <device_id>``; with
  ``device_id=None`` the DisplayDevice aggregate is queried instead.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_UPOWER_PATH: str = "upower"

DEFAULT_TIMEOUT_S: float = 5.0
"""Upper bound for a single upower invocation in seconds."""

DISPLAY_DEVICE: str = "/org/freedesktop/UPower/devices/DisplayDevice"
"""UPower's composite device, used when no battery id is known yet."""


class DataProvider(Protocol):
    """What the scheduler and discovery need from a battery data source."""

    async def list_battery_devices(self) -> str | None: ...

    async def query_device(self, device_id: str | None) -> str | None: ...


class UPowerProvider:
    """Data provider backed by the ``upower`` CLI.

    Args:
        upower_path: Executable name or absolute path of ``upower``.
        timeout_s: Seconds to wait for each invocation before killing it.
    """

    def __init__(
        self,
        *,
        upower_path: str = DEFAULT_UPOWER_PATH,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._upower_path = upower_path
        self._timeout_s = timeout_s

    async def list_battery_devices(self) -> str | None:
        """Return ``upower --enumerate`` output, or ``None`` on failure."""
        return await self._run("--enumerate")

    async def query_device(self, device_id: str | None) -> str | None:
        """Return the ``key: value`` dump for *device_id*, or ``None`` on failure.

        Args:
            device_id: UPower object path.  ``None`` selects the
                DisplayDevice aggregate.
        """
        return await self._run("--show-info", device_id or DISPLAY_DEVICE)

    async def _run(self, *args: str) -> str | None:
        """Execute upower with *args* and return stdout text, or ``None``."""
        argv = [self._upower_path, *args]
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError:
            logger.warning("Cannot execute %s", self._upower_path, exc_info=True)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout_s
            )
        except TimeoutError:
            logger.warning(
                "%s timed out after %.1fs, killing", " ".join(argv), self._timeout_s
            )
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return None

        if proc.returncode != 0:
            logger.warning(
                "%s exited with status %s: %s",
                " ".join(argv),
                proc.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return None

        text = stdout.decode("utf-8", errors="replace")
        if not text.strip():
            logger.warning("%s returned empty output", " ".join(argv))
            return None
        return text
