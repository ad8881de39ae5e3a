"""
Snapshot store and JSON state file writer.

The SnapshotStore holds the single authoritative BatterySnapshot.  Publishing
rebinds one attribute, so a reader always sees either the previous or the
new snapshot, never a mix; readers take no lock.  Listeners are called after
each swap with the new snapshot.

StateFileWriter is a listener that mirrors the published state (snapshot,
title, detail, icon) to a JSON file.  The file is replaced atomically on
every publish so external consumers never read a half-written document.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from battwatch.src.formatting import published_state
from battwatch.src.models import BatterySnapshot

logger = logging.getLogger(__name__)

Listener = Callable[[BatterySnapshot], None]


class SnapshotStore:
    """Holds the current snapshot and notifies listeners on replacement."""

    def __init__(self) -> None:
        self._current: BatterySnapshot | None = None
        self._version: int = 0
        self._listeners: list[Listener] = []

    @property
    def current(self) -> BatterySnapshot | None:
        """The latest published snapshot, or ``None`` before the first publish."""
        return self._current

    @property
    def version(self) -> int:
        """Number of publishes so far."""
        return self._version

    def add_listener(self, listener: Listener) -> None:
        """Register *listener* to be called after every publish."""
        self._listeners.append(listener)

    def publish(self, snapshot: BatterySnapshot) -> None:
        """Replace the current snapshot and notify listeners.

        A failing listener is logged and does not prevent the others from
        running or the snapshot from being published.
        """
        self._current = snapshot
        self._version += 1
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.warning("Snapshot listener %r failed", listener, exc_info=True)

    def mark_absent(self, ts: datetime | None = None) -> BatterySnapshot:
        """Publish a ``present=False`` snapshot.

        The previous snapshot's other fields are kept (copied, not mutated);
        with nothing published yet a default snapshot is used.

        Returns:
            The snapshot that was published.
        """
        previous = self._current
        if previous is None:
            snapshot = BatterySnapshot(present=False, ts=ts)
        else:
            snapshot = previous.model_copy(update={"present": False, "ts": ts})
        self.publish(snapshot)
        return snapshot


class StateFileWriter:
    """Writes the published battery state to a JSON file.

    Args:
        path: Filesystem path for the state JSON file. Accepts str or Path.
        show_percentage: Title toggle passed to the formatter.
        show_time: Title toggle passed to the formatter.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        show_percentage: bool = True,
        show_time: bool = False,
    ) -> None:
        self.path = Path(path)
        self._show_percentage = show_percentage
        self._show_time = show_time

    def __call__(self, snapshot: BatterySnapshot) -> None:
        self.write(snapshot)

    def write(self, snapshot: BatterySnapshot) -> None:
        """Write *snapshot* and its formatted strings, replacing the file."""
        data = published_state(
            snapshot,
            show_percentage=self._show_percentage,
            show_time=self._show_time,
        )
        data["published_ts"] = datetime.now(tz=UTC).isoformat()

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data))
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
