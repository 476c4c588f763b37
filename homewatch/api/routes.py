"""
Homewatch API Routes - control surface endpoint handlers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from fastapi import APIRouter, Depends, HTTPException

from homewatch import __version__
from homewatch.api import schemas
from homewatch.sentinel.orchestrator import CheckOrchestrator
from homewatch.sentinel.runner import describe_error
from homewatch.shared.errors import NoSnapshotError
from homewatch.storage.database import Database

logger = logging.getLogger("homewatch.api")

router = APIRouter(prefix="/api", tags=["homewatch"])


@dataclass
class AppState:
    """Application state container."""

    orchestrator: CheckOrchestrator | None = None
    database: Database | None = None
    started_at: float = field(default_factory=time.monotonic)


app_state = AppState()


def get_orchestrator() -> CheckOrchestrator:
    """Dependency: Get the shared check orchestrator."""
    if app_state.orchestrator is None:
        raise HTTPException(status_code=503, detail="Orchestrator not initialized")
    return app_state.orchestrator


@router.get("/status", response_model=schemas.SnapshotResponse)
async def get_status(
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
) -> schemas.SnapshotResponse:
    """Latest aggregate snapshot."""
    snapshot = orchestrator.latest
    if snapshot is None:
        raise HTTPException(status_code=503, detail=str(NoSnapshotError()))
    return schemas.SnapshotResponse.from_snapshot(snapshot)


@router.get("/health", response_model=schemas.HealthResponse)
async def health_check() -> schemas.HealthResponse:
    """Liveness of the sentinel process, independent of monitored services."""
    orchestrator = app_state.orchestrator
    components = {
        "orchestrator": "ok" if orchestrator else "not_initialized",
        "check_loop": "ok" if orchestrator and orchestrator.running else "not_running",
    }
    return schemas.HealthResponse(
        status="ok",
        uptime=round(time.monotonic() - app_state.started_at, 3),
        version=__version__,
        components=components,
    )


@router.get("/check", response_model=schemas.SnapshotResponse)
async def trigger_check(
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
) -> schemas.SnapshotResponse:
    """Run one cycle now and return its snapshot."""
    try:
        snapshot = await orchestrator.run_cycle()
    except Exception as exc:
        logger.exception("Manual check failed")
        raise HTTPException(status_code=500, detail=describe_error(exc)) from exc
    return schemas.SnapshotResponse.from_snapshot(snapshot)


@router.get("/alerts", response_model=schemas.AlertStatesResponse)
async def list_alerts(
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
) -> schemas.AlertStatesResponse:
    """Debounce state of every service observed so far."""
    return schemas.AlertStatesResponse.from_states(orchestrator.debouncer.states())
