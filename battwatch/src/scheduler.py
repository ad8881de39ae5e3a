"""
Poll scheduler: discovery -> acquisition -> parse -> derive -> publish.

Runs one cycle per tick on a fixed, adjustable interval.  Designed to be
robust:

- At most one cycle is in flight; an out-of-band trigger while a cycle is
  running is coalesced rather than queued.
- A cycle that outruns the interval causes the missed ticks to be skipped.
- A provider failure keeps the previous snapshot (stale but valid).
- Discovery reporting no device publishes ``present=False``.
- After ``rediscover_after_failures`` consecutive query failures the known
  device is forgotten so the next tick runs discovery again (unless the
  device was pinned by configuration).
- Never raises past a cycle boundary.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from battwatch.src.derivation import derive
from battwatch.src.discovery import discover
from battwatch.src.parser import parse

if TYPE_CHECKING:
    from battwatch.src.provider import DataProvider
    from battwatch.src.store import SnapshotStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_INTERVAL_S: float = 1.0
"""Lower bound on the poll interval, to avoid hammering the provider."""

MAX_INTERVAL_S: float = 120.0

DEFAULT_REDISCOVER_AFTER_FAILURES: int = 3


def clamp_interval(interval_s: float) -> float:
    """Bound *interval_s* to [MIN_INTERVAL_S, MAX_INTERVAL_S]."""
    return max(MIN_INTERVAL_S, min(MAX_INTERVAL_S, float(interval_s)))


class PollScheduler:
    """Drives battery poll cycles and publishes snapshots to a store.

    Args:
        provider: Source of raw device listings and device dumps.
        store: Where derived snapshots are published.
        interval_s: Seconds between ticks, clamped to 1-120.
        device_id: Pin a specific device and skip discovery.
        rediscover_after_failures: Consecutive query failures after which an
            unpinned device id is forgotten.  0 disables rediscovery.
    """

    def __init__(
        self,
        provider: DataProvider,
        store: SnapshotStore,
        *,
        interval_s: float = 5.0,
        device_id: str | None = None,
        rediscover_after_failures: int = DEFAULT_REDISCOVER_AFTER_FAILURES,
    ) -> None:
        self._provider = provider
        self._store = store
        self._interval_s = clamp_interval(interval_s)
        self._device_id = device_id or None
        self._pinned = bool(device_id)
        self._rediscover_after_failures = rediscover_after_failures
        self._consecutive_failures: int = 0
        self._lock = asyncio.Lock()

    # -- properties ---------------------------------------------------------

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def device_id(self) -> str | None:
        """The battery currently being polled, if known."""
        return self._device_id

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def set_interval(self, interval_s: float) -> None:
        """Change the interval; applies from the next scheduled tick."""
        new_interval = clamp_interval(interval_s)
        if new_interval != interval_s:
            logger.warning(
                "Poll interval %ss out of range, using %ss", interval_s, new_interval
            )
        self._interval_s = new_interval
        logger.info("Poll interval set to %ss", new_interval)

    # -- single cycle -------------------------------------------------------

    async def poll_once(self) -> bool:
        """Run one cycle unless one is already in flight.

        Catches all exceptions so that the caller's loop is never broken.

        Returns:
            True if a cycle ran, False if it was coalesced into the one in
            flight.
        """
        if self._lock.locked():
            logger.debug("Cycle already in flight, coalescing")
            return False
        async with self._lock:
            try:
                await self._cycle()
            except Exception:
                logger.error("Poll cycle error", exc_info=True)
        return True

    async def trigger(self) -> bool:
        """Request an immediate out-of-band cycle (coalesced if busy)."""
        return await self.poll_once()

    async def _cycle(self) -> None:
        ts = datetime.now(tz=UTC)

        if self._device_id is None:
            self._device_id = await discover(self._provider)
            if self._device_id is None:
                self._store.mark_absent(ts)
                logger.info("No battery present, published absent snapshot")
                return

        raw = await self._provider.query_device(self._device_id)
        if raw is None:
            self._record_failure("Provider returned no data")
            return

        data = parse(raw)
        if not data:
            self._record_failure("Provider output contained no fields")
            return

        self._consecutive_failures = 0
        snapshot = derive(data, device_id=self._device_id, ts=ts)
        self._store.publish(snapshot)
        logger.info(
            "Published snapshot: device=%s present=%s level=%s charging=%s power=%.2fW",
            snapshot.device_id,
            snapshot.present,
            snapshot.level_percent,
            snapshot.charging,
            snapshot.power_w,
        )

    def _record_failure(self, reason: str) -> None:
        """Count a failed acquisition; the previous snapshot stays published."""
        self._consecutive_failures += 1
        logger.warning(
            "%s for %s, keeping previous snapshot (consecutive failures: %d)",
            reason,
            self._device_id,
            self._consecutive_failures,
        )
        if (
            not self._pinned
            and self._rediscover_after_failures > 0
            and self._consecutive_failures >= self._rediscover_after_failures
        ):
            logger.warning("Forgetting device %s, will rediscover", self._device_id)
            self._device_id = None
            self._consecutive_failures = 0

    # -- loop ---------------------------------------------------------------

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Poll on the configured interval until *shutdown_event* is set.

        Ticks are scheduled on the event loop's monotonic clock.  When a
        cycle takes longer than the interval, the ticks it overran are
        skipped so that at most one acquisition is ever outstanding.
        """
        loop = asyncio.get_running_loop()
        logger.info("Poll loop started (interval=%ss)", self._interval_s)
        next_tick = loop.time()
        while not shutdown_event.is_set():
            await self.poll_once()

            now = loop.time()
            next_tick += self._interval_s
            if next_tick <= now:
                skipped = int((now - next_tick) // self._interval_s) + 1
                logger.debug("Cycle overran interval, skipping %d tick(s)", skipped)
                next_tick += skipped * self._interval_s

            # Use wait with timeout so we can check shutdown between sleeps
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(
                    shutdown_event.wait(),
                    timeout=next_tick - now,
                )
        logger.info("Poll loop stopped")
