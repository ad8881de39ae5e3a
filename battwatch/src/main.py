"""
Battery telemetry daemon entrypoint.

Runs the poll loop that discovers the battery, acquires raw UPower output,
derives a BatterySnapshot and publishes it to the SnapshotStore.  Published
snapshots are mirrored to a JSON state file when ``BATTWATCH_STATE_FILE`` is
set, and served over a read-only HTTP API when ``BATTWATCH_API_ENABLED`` is
true (the API server runs concurrently with the poll loop).

Graceful shutdown on SIGTERM/SIGINT sets a shared asyncio.Event; the poll
loop finishes its current cycle and the API server is asked to exit.

``--once`` runs a single cycle, prints the published state as JSON and exits
(status 1 when no battery is present).

Structured JSON logging is used for all events.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import uvicorn

from battwatch.src.api import create_app
from battwatch.src.formatting import published_state
from battwatch.src.provider import UPowerProvider
from battwatch.src.scheduler import PollScheduler
from battwatch.src.store import SnapshotStore, StateFileWriter

if TYPE_CHECKING:
    from battwatch.src.config import BattwatchSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class _JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger (stderr)."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_config_summary(settings: BattwatchSettings) -> None:
    """Log the effective configuration at startup."""
    logger.info(
        "Battery daemon starting with config: "
        "poll_interval_s=%s, upower_path=%s, provider_timeout_s=%s, "
        "device_id=%s, rediscover_after_failures=%s, state_file=%s, "
        "show_percentage=%s, show_time=%s, "
        "api_enabled=%s, api_host=%s, api_port=%s, log_level=%s",
        settings.poll_interval_s,
        settings.upower_path,
        settings.provider_timeout_s,
        settings.device_id or "<discover>",
        settings.rediscover_after_failures,
        settings.state_file or "<disabled>",
        settings.show_percentage,
        settings.show_time,
        settings.api_enabled,
        settings.api_host,
        settings.api_port,
        settings.log_level,
    )


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_components(
    settings: BattwatchSettings,
) -> tuple[SnapshotStore, PollScheduler]:
    """Create the store (with state file listener) and the scheduler."""
    store = SnapshotStore()
    if settings.state_file:
        store.add_listener(
            StateFileWriter(
                settings.state_file,
                show_percentage=settings.show_percentage,
                show_time=settings.show_time,
            )
        )

    provider = UPowerProvider(
        upower_path=settings.upower_path,
        timeout_s=settings.provider_timeout_s,
    )
    scheduler = PollScheduler(
        provider,
        store,
        interval_s=settings.poll_interval_s,
        device_id=settings.device_id or None,
        rediscover_after_failures=settings.rediscover_after_failures,
    )
    return store, scheduler


class _ApiServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the daemon."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


async def _serve_api(server: uvicorn.Server, shutdown_event: asyncio.Event) -> None:
    """Run *server* until *shutdown_event* is set."""
    task = asyncio.create_task(server.serve())
    await shutdown_event.wait()
    server.should_exit = True
    await task
    logger.info("API server stopped")


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


async def run_once(settings: BattwatchSettings) -> int:
    """Run a single poll cycle and print the published state as JSON.

    Returns:
        Process exit status: 0 when a battery is present, 1 otherwise.
    """
    store, scheduler = build_components(settings)
    await scheduler.poll_once()

    snapshot = store.current
    if snapshot is None:
        print(json.dumps({"error": "no data from provider"}))
        return 1
    print(
        json.dumps(
            published_state(
                snapshot,
                show_percentage=settings.show_percentage,
                show_time=settings.show_time,
            ),
            indent=2,
        )
    )
    return 0 if snapshot.present else 1


async def async_main(once: bool = False) -> int:
    """Async entrypoint: load config, build components, run loops.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    from battwatch.src.config import BattwatchSettings

    settings = BattwatchSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings)

    if once:
        return await run_once(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    store, scheduler = build_components(settings)
    tasks = [scheduler.run(shutdown_event)]

    if settings.api_enabled:
        app = create_app(
            store,
            scheduler,
            show_percentage=settings.show_percentage,
            show_time=settings.show_time,
        )
        server = _ApiServer(
            uvicorn.Config(
                app,
                host=settings.api_host,
                port=settings.api_port,
                log_config=None,
            )
        )
        tasks.append(_serve_api(server, shutdown_event))
        logger.info("Serving state API on %s:%s", settings.api_host, settings.api_port)

    await asyncio.gather(*tasks)
    logger.info("Shutdown complete")
    return 0


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        description="Battery telemetry daemon (UPower)"
    )
    p.add_argument(
        "--once", action="store_true",
        help="Poll once, print the published state as JSON and exit"
    )
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Synchronous entrypoint for the battery daemon."""
    args = parse_args(argv)
    sys.exit(asyncio.run(async_main(once=args.once)))


if __name__ == "__main__":
    main()
