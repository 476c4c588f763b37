"""
Homewatch API Schemas - Pydantic models for the control surface.

Defines response models for:
- GET /api/status - Latest aggregate snapshot
- GET /api/check - Snapshot of a freshly triggered cycle
- GET /api/health - Liveness of the sentinel itself
- GET /api/alerts - Per-service alert state
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from homewatch.sentinel.models import AggregateSnapshot, AlertState


class ServiceResultModel(BaseModel):
    """One service's result. Diagnostic fields are optional and opaque."""

    status: str = Field(..., description="up | down | degraded")
    reason: str | None = None
    error: str | None = None
    response_ms: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class SnapshotResponse(BaseModel):
    """Aggregate snapshot of one check cycle."""

    overall: str = Field(..., description="healthy | degraded | partial")
    last_check: str = Field(..., description="ISO-8601 completion time (UTC)")
    check_duration_ms: float
    services: dict[str, ServiceResultModel]
    alerts_active: int = Field(0, description="Services with an open down alert")

    @classmethod
    def from_snapshot(cls, snapshot: AggregateSnapshot) -> "SnapshotResponse":
        return cls(**snapshot.to_dict())


class HealthResponse(BaseModel):
    """Sentinel process liveness."""

    status: str = Field("ok", description="Service status")
    uptime: float = Field(..., description="Seconds since the process started")
    version: str = Field("1.0.0", description="API version")
    components: dict[str, str] = Field(default_factory=dict, description="Component status")


class AlertStateModel(BaseModel):
    consecutive_failures: int
    last_confirmed_status: str
    alerted: bool


class AlertStatesResponse(BaseModel):
    active: int
    services: dict[str, AlertStateModel]

    @classmethod
    def from_states(cls, states: dict[str, AlertState]) -> "AlertStatesResponse":
        return cls(
            active=sum(1 for s in states.values() if s.alerted),
            services={name: AlertStateModel(**s.to_dict()) for name, s in states.items()},
        )
