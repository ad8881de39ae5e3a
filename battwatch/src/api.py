"""
Read-only HTTP API over the published battery state.

Endpoints:
- GET /health: liveness, ``{"status": "ok"}``.
- GET /v1/battery: the current snapshot plus title, detail, icon and
  formatted remaining time.  503 until the first snapshot is published.
- POST /v1/battery/refresh: request an out-of-band poll cycle.  Coalesced
  into the running cycle when one is in flight.

The store, scheduler and presentation toggles are kept on ``app.state`` for
route handlers.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI, HTTPException, Request

from battwatch.src.formatting import published_state

if TYPE_CHECKING:
    from battwatch.src.scheduler import PollScheduler
    from battwatch.src.store import SnapshotStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["battery"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status."""
    return {"status": "ok"}


@router.get("/v1/battery")
async def battery(request: Request) -> dict:
    """Return the current published battery state.

    Raises:
        HTTPException: 503 if nothing has been published yet.
    """
    state = request.app.state
    snapshot = state.store.current
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No battery snapshot published yet")
    data = published_state(
        snapshot,
        show_percentage=state.show_percentage,
        show_time=state.show_time,
    )
    data["version"] = state.store.version
    return data


@router.post("/v1/battery/refresh")
async def refresh(request: Request) -> dict[str, bool]:
    """Run a poll cycle now, unless one is already in flight."""
    scheduler = request.app.state.scheduler
    if scheduler is None:
        raise HTTPException(status_code=404, detail="Refresh not available")
    ran = await scheduler.trigger()
    if not ran:
        logger.info("Refresh coalesced into in-flight cycle")
    return {"ran": ran}


def create_app(
    store: SnapshotStore,
    scheduler: PollScheduler | None = None,
    *,
    show_percentage: bool = True,
    show_time: bool = False,
) -> FastAPI:
    """Build the FastAPI application bound to *store*.

    Args:
        store: Snapshot store to serve from.
        scheduler: Scheduler used by the refresh endpoint, if any.
        show_percentage: Title toggle passed to the formatter.
        show_time: Title toggle passed to the formatter.
    """
    app = FastAPI(
        title="battwatch",
        description="Read-only battery telemetry state.",
        version="0.1.0",
    )
    app.state.store = store
    app.state.scheduler = scheduler
    app.state.show_percentage = show_percentage
    app.state.show_time = show_time
    app.include_router(router)
    return app
