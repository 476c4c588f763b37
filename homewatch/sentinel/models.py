"""
Homewatch Sentinel — Data Models

Per-cycle probe results, per-service alert state and the aggregate
snapshot surfaced by the control plane.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Mapping


class ServiceStatus(str, Enum):
    """Health of one service in one cycle."""

    UP = "up"
    DOWN = "down"
    DEGRADED = "degraded"


class OverallStatus(str, Enum):
    """System-wide status derived from a whole result set."""

    HEALTHY = "healthy"  # every service up
    DEGRADED = "degraded"  # at least one service down
    PARTIAL = "partial"  # nothing down, something degraded


class AlertType(str, Enum):
    DOWN = "down"
    RECOVERY = "recovery"


class NotificationPriority(IntEnum):
    """Delivery urgency understood by the push channel."""

    NORMAL = 0
    ELEVATED = 1


_KNOWN_RESULT_KEYS = ("status", "reason", "error", "response_ms", "details")


@dataclass
class ServiceResult:
    """Result of a single probe. Only ``status`` is interpreted by the core."""

    status: ServiceStatus
    reason: str = ""
    error: str = ""
    response_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Plain strings from probes are accepted; anything unknown counts as down.
        if not isinstance(self.status, ServiceStatus):
            try:
                self.status = ServiceStatus(self.status)
            except (TypeError, ValueError):
                self.error = self.error or f"invalid probe status: {self.status!r}"
                self.status = ServiceStatus.DOWN

    @property
    def is_up(self) -> bool:
        return self.status is ServiceStatus.UP

    @classmethod
    def up(cls, response_ms: float | None = None, **details: Any) -> "ServiceResult":
        return cls(status=ServiceStatus.UP, response_ms=response_ms, details=dict(details))

    @classmethod
    def down(cls, reason: str = "", error: str = "", **details: Any) -> "ServiceResult":
        return cls(status=ServiceStatus.DOWN, reason=reason, error=error, details=dict(details))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceResult":
        """
        Build a result from a probe's plain mapping.

        Unknown keys are carried into ``details``. A missing or invalid
        status becomes ``down`` so nothing without a status enters a
        result set.
        """
        details = dict(data.get("details") or {})
        details.update({k: v for k, v in data.items() if k not in _KNOWN_RESULT_KEYS})

        response_ms = data.get("response_ms")
        return cls(
            status=data.get("status"),
            reason=str(data.get("reason") or ""),
            error=str(data.get("error") or ""),
            response_ms=float(response_ms) if response_ms is not None else None,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.reason:
            data["reason"] = self.reason
        if self.error:
            data["error"] = self.error
        if self.response_ms is not None:
            data["response_ms"] = round(self.response_ms, 1)
        if self.details:
            data["details"] = self.details
        return data


ResultSet = dict[str, ServiceResult]


@dataclass
class AlertState:
    """Debounce state for one service, retained across cycles."""

    consecutive_failures: int = 0
    last_confirmed_status: ServiceStatus = ServiceStatus.UP
    alerted: bool = False

    def reset(self) -> None:
        self.consecutive_failures = 0
        self.last_confirmed_status = ServiceStatus.UP
        self.alerted = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "consecutive_failures": self.consecutive_failures,
            "last_confirmed_status": self.last_confirmed_status.value,
            "alerted": self.alerted,
        }


@dataclass(frozen=True)
class AlertEvent:
    """A confirmed transition for one service, ready for dispatch."""

    type: AlertType
    service: str
    message: str

    @property
    def title(self) -> str:
        if self.type is AlertType.DOWN:
            return f"🔴 {self.service} DOWN"
        return f"🟢 {self.service} RECOVERED"

    @property
    def priority(self) -> NotificationPriority:
        if self.type is AlertType.DOWN:
            return NotificationPriority.ELEVATED
        return NotificationPriority.NORMAL

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "service": self.service, "message": self.message}


@dataclass(frozen=True)
class AggregateSnapshot:
    """The externally visible output of one cycle."""

    overall: OverallStatus
    last_check: str
    check_duration_ms: float
    services: Mapping[str, ServiceResult]
    alerts_active: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall.value,
            "last_check": self.last_check,
            "check_duration_ms": round(self.check_duration_ms, 1),
            "services": {name: result.to_dict() for name, result in self.services.items()},
            "alerts_active": self.alerts_active,
        }
