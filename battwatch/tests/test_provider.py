"""
Tests for the UPower data provider.

Verifies the upower command lines that are executed and that every failure
mode (non-zero exit, empty output, timeout, missing binary) is reported as
None rather than raised.  Tests use a mocked asyncio.create_subprocess_exec.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from battwatch.src.provider import DISPLAY_DEVICE, UPowerProvider

# ---------------------------------------------------------------------------
# Helpers: build a mock subprocess
# ---------------------------------------------------------------------------


def _make_proc(
    stdout: bytes = b"",
    stderr: bytes = b"",
    returncode: int = 0,
    hang: bool = False,
) -> MagicMock:
    """Create a mock asyncio.subprocess.Process.

    Args:
        stdout: Bytes returned on stdout.
        stderr: Bytes returned on stderr.
        returncode: Exit status after communicate().
        hang: If True, communicate() never completes.
    """
    proc = MagicMock()
    proc.returncode = returncode
    if hang:

        async def _forever() -> tuple[bytes, bytes]:
            await asyncio.sleep(3600)
            return b"", b""

        proc.communicate = AsyncMock(side_effect=_forever)
    else:
        proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.kill = MagicMock()
    proc.wait = AsyncMock(return_value=-9)
    return proc


_EXEC = "battwatch.src.provider.asyncio.create_subprocess_exec"


# ===========================================================================
# Command lines
# ===========================================================================


class TestCommandLines:
    @pytest.mark.asyncio
    async def test_list_runs_enumerate(self) -> None:
        proc = _make_proc(stdout=b"/org/freedesktop/UPower/devices/battery_BAT0\n")
        with patch(_EXEC, AsyncMock(return_value=proc)) as mock_exec:
            result = await UPowerProvider().list_battery_devices()

        assert result == "/org/freedesktop/UPower/devices/battery_BAT0\n"
        assert mock_exec.call_args.args == ("upower", "--enumerate")

    @pytest.mark.asyncio
    async def test_query_runs_show_info(self) -> None:
        proc = _make_proc(stdout=b"  present: yes\n")
        with patch(_EXEC, AsyncMock(return_value=proc)) as mock_exec:
            result = await UPowerProvider(upower_path="/usr/bin/upower").query_device(
                "/org/freedesktop/UPower/devices/battery_BAT0"
            )

        assert result == "  present: yes\n"
        assert mock_exec.call_args.args == (
            "/usr/bin/upower",
            "--show-info",
            "/org/freedesktop/UPower/devices/battery_BAT0",
        )

    @pytest.mark.asyncio
    async def test_query_without_id_uses_display_device(self) -> None:
        proc = _make_proc(stdout=b"  present: yes\n")
        with patch(_EXEC, AsyncMock(return_value=proc)) as mock_exec:
            await UPowerProvider().query_device(None)

        assert mock_exec.call_args.args == ("upower", "--show-info", DISPLAY_DEVICE)

    @pytest.mark.asyncio
    async def test_non_utf8_output_is_replaced(self) -> None:
        proc = _make_proc(stdout=b"vendor: \xff\n")
        with patch(_EXEC, AsyncMock(return_value=proc)):
            result = await UPowerProvider().query_device(None)
        assert result is not None
        assert result.startswith("vendor: ")


# ===========================================================================
# Failure modes
# ===========================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_non_zero_exit_returns_none(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        proc = _make_proc(stdout=b"x", stderr=b"boom", returncode=1)
        with (
            patch(_EXEC, AsyncMock(return_value=proc)),
            caplog.at_level(logging.WARNING, logger="battwatch.src.provider"),
        ):
            result = await UPowerProvider().list_battery_devices()

        assert result is None
        assert "exited with status 1" in caplog.text
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_output_returns_none(self) -> None:
        proc = _make_proc(stdout=b"   \n")
        with patch(_EXEC, AsyncMock(return_value=proc)):
            assert await UPowerProvider().query_device(None) is None

    @pytest.mark.asyncio
    async def test_missing_binary_returns_none(self) -> None:
        with patch(_EXEC, AsyncMock(side_effect=FileNotFoundError("upower"))):
            assert await UPowerProvider().list_battery_devices() is None

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self) -> None:
        proc = _make_proc(hang=True)
        with patch(_EXEC, AsyncMock(return_value=proc)):
            result = await UPowerProvider(timeout_s=0.05).query_device(None)

        assert result is None
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()
