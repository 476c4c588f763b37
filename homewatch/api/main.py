"""
Homewatch FastAPI Service - Main Application.

Control surface for the sentinel: exposes the latest snapshot, the
sentinel's own liveness, and a manual check trigger.

Usage:
    # Development
    uvicorn homewatch.api.main:app --reload --host 0.0.0.0 --port 3333

    # Production
    python -m homewatch.main

Endpoints:
    GET /api/status - Latest aggregate snapshot (503 before the first cycle)
    GET /api/health - Sentinel liveness and uptime
    GET /api/check - Run one cycle now
    GET /api/alerts - Per-service alert state
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from homewatch import __version__
from homewatch.api.routes import app_state, router
from homewatch.notify.notifier import build_notifier
from homewatch.probes.registry import build_default_probes
from homewatch.sentinel.alerts import AlertDebouncer
from homewatch.sentinel.orchestrator import CheckOrchestrator
from homewatch.sentinel.runner import ProbeRunner
from homewatch.shared import settings
from homewatch.storage.database import Database
from homewatch.storage.snapshot_store import SqliteSnapshotStore

logger = logging.getLogger("homewatch.api")


def build_orchestrator(database: Database) -> CheckOrchestrator:
    """Wire the production orchestrator from settings."""
    return CheckOrchestrator(
        build_default_probes(),
        debouncer=AlertDebouncer(),
        notifier=build_notifier(
            settings.CALENDAR_GPT_URL,
            settings.CALENDAR_GPT_API_KEY,
            settings.NOTIFY_TIMEOUT_SECONDS,
        ),
        store=SqliteSnapshotStore(database, settings.SNAPSHOT_DOCUMENT_ID),
        database=database,
        runner=ProbeRunner(timeout_seconds=settings.PROBE_TIMEOUT_SECONDS),
        interval_seconds=settings.CHECK_INTERVAL_SECONDS,
    )


def create_app(
    orchestrator: CheckOrchestrator | None = None,
    *,
    run_scheduler: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator (tests); built from settings when omitted
        run_scheduler: Start the periodic check loop during lifespan startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---- Startup ----
        logger.info("Homewatch API starting...")
        app_state.started_at = time.monotonic()

        if orchestrator is None:
            app_state.database = Database(settings.DB_PATH)
            app_state.orchestrator = build_orchestrator(app_state.database)
        else:
            app_state.orchestrator = orchestrator

        if run_scheduler:
            await app_state.orchestrator.start(announce=True)

        yield

        # ---- Shutdown ----
        logger.info("Homewatch API shutting down...")
        try:
            await app_state.orchestrator.stop()
        except Exception as e:
            logger.error(f"Error stopping check loop: {e}")

        if app_state.database:
            try:
                await app_state.database.close()
            except Exception as e:
                logger.error(f"Error closing database: {e}")

        app_state.orchestrator = None
        app_state.database = None
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Homewatch Sentinel API",
        description="Latest health snapshot and manual checks for the home infrastructure.",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Homewatch Sentinel API",
            "version": __version__,
            "status": "online",
            "endpoints": {
                "status": "GET /api/status",
                "health": "GET /api/health",
                "check": "GET /api/check",
                "alerts": "GET /api/alerts",
            },
        }

    return app


app = create_app()
