"""
Test overall-status derivation and result serialisation.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from homewatch.sentinel.models import (
    AggregateSnapshot,
    AlertEvent,
    AlertType,
    OverallStatus,
    ServiceResult,
    ServiceStatus,
)
from homewatch.sentinel.status import (
    count_statuses,
    derive_overall_status,
    failing_services,
    summarize,
)


def _results(*statuses: ServiceStatus) -> dict[str, ServiceResult]:
    return {f"svc{i}": ServiceResult(status=s) for i, s in enumerate(statuses)}


class TestDeriveOverallStatus:
    def test_all_up_is_healthy(self):
        assert derive_overall_status(_results(ServiceStatus.UP, ServiceStatus.UP)) is OverallStatus.HEALTHY

    def test_any_down_is_degraded(self):
        results = _results(ServiceStatus.UP, ServiceStatus.DEGRADED, ServiceStatus.DOWN)
        assert derive_overall_status(results) is OverallStatus.DEGRADED

    def test_degraded_without_down_is_partial(self):
        results = _results(ServiceStatus.UP, ServiceStatus.DEGRADED)
        assert derive_overall_status(results) is OverallStatus.PARTIAL

    def test_empty_is_healthy(self):
        assert derive_overall_status({}) is OverallStatus.HEALTHY


def test_count_and_failing_services():
    results = _results(ServiceStatus.UP, ServiceStatus.DOWN, ServiceStatus.DEGRADED, ServiceStatus.UP)
    assert count_statuses(results) == {
        ServiceStatus.UP: 2,
        ServiceStatus.DOWN: 1,
        ServiceStatus.DEGRADED: 1,
    }
    assert failing_services(results) == ["svc1", "svc2"]


def test_summarize():
    results = _results(ServiceStatus.UP, ServiceStatus.DOWN)
    assert summarize(results, 812.4) == "Checks done: 1/2 up (812ms); not up: svc1"
    assert summarize(_results(ServiceStatus.UP), 5) == "Checks done: 1/1 up (5ms)"


class TestServiceResult:
    def test_from_dict_moves_unknown_keys_to_details(self):
        result = ServiceResult.from_dict(
            {"status": "up", "response_ms": 42, "cpu": 12, "details": {"ram_pct": 40}}
        )
        assert result.status is ServiceStatus.UP
        assert result.response_ms == 42.0
        assert result.details == {"cpu": 12, "ram_pct": 40}

    def test_from_dict_invalid_status(self):
        result = ServiceResult.from_dict({"status": "UP?"})
        assert result.status is ServiceStatus.DOWN
        assert result.error == "invalid probe status: 'UP?'"

    def test_from_dict_keeps_probe_error(self):
        result = ServiceResult.from_dict({"error": "boom"})
        assert result.status is ServiceStatus.DOWN
        assert result.error == "boom"

    def test_to_dict_omits_empty_fields(self):
        assert ServiceResult.up().to_dict() == {"status": "up"}
        assert ServiceResult.down(reason="no db").to_dict() == {"status": "down", "reason": "no db"}

    def test_to_dict_rounds_response_time(self):
        data = ServiceResult.up(response_ms=123.456, note="x").to_dict()
        assert data == {"status": "up", "response_ms": 123.5, "details": {"note": "x"}}


def test_snapshot_to_dict():
    snapshot = AggregateSnapshot(
        overall=OverallStatus.PARTIAL,
        last_check="2026-01-01T00:00:00+00:00",
        check_duration_ms=1500.04,
        services={"whatsapp": ServiceResult(status=ServiceStatus.DEGRADED, details={"instances": {}})},
        alerts_active=0,
    )
    assert snapshot.to_dict() == {
        "overall": "partial",
        "last_check": "2026-01-01T00:00:00+00:00",
        "check_duration_ms": 1500.0,
        "services": {"whatsapp": {"status": "degraded", "details": {"instances": {}}}},
        "alerts_active": 0,
    }


def test_alert_event_to_dict():
    event = AlertEvent(AlertType.RECOVERY, "plex", "🟢 plex is back UP")
    assert event.to_dict() == {"type": "recovery", "service": "plex", "message": "🟢 plex is back UP"}


class TestServiceResultStatusNormalisation:
    def test_plain_string_status_is_converted(self):
        result = ServiceResult(status="up")
        assert result.status is ServiceStatus.UP
        assert result.is_up
        assert result.to_dict() == {"status": "up"}

    def test_unknown_status_becomes_down(self):
        result = ServiceResult(status="sideways", reason="r")
        assert result.status is ServiceStatus.DOWN
        assert result.error == "invalid probe status: 'sideways'"
        assert result.reason == "r"

    def test_string_statuses_derive_overall(self):
        results = {"a": ServiceResult(status="up"), "b": ServiceResult(status="degraded")}
        assert derive_overall_status({"a": results["a"]}) is OverallStatus.HEALTHY
        assert derive_overall_status(results) is OverallStatus.PARTIAL
