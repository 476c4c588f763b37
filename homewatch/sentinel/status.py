"""
Overall-status derivation.

Works on the raw statuses of the current cycle only; alert/debounce state
never influences the overall label.
"""

from __future__ import annotations

from collections import Counter
from typing import Mapping

from homewatch.sentinel.models import OverallStatus, ServiceResult, ServiceStatus


def derive_overall_status(results: Mapping[str, ServiceResult]) -> OverallStatus:
    """
    Reduce a result set to one label.

    ``healthy`` iff every result is up, else ``degraded`` iff any result is
    down, else ``partial``. An empty result set is vacuously healthy.
    """
    statuses = [result.status for result in results.values()]
    if all(status is ServiceStatus.UP for status in statuses):
        return OverallStatus.HEALTHY
    if any(status is ServiceStatus.DOWN for status in statuses):
        return OverallStatus.DEGRADED
    return OverallStatus.PARTIAL


def count_statuses(results: Mapping[str, ServiceResult]) -> dict[ServiceStatus, int]:
    counts = Counter(result.status for result in results.values())
    return {status: counts.get(status, 0) for status in ServiceStatus}


def failing_services(results: Mapping[str, ServiceResult]) -> list[str]:
    """Names of services that are not up, in result-set order."""
    return [name for name, result in results.items() if not result.is_up]


def summarize(results: Mapping[str, ServiceResult], duration_ms: float) -> str:
    """One-line cycle summary for the log."""
    up = count_statuses(results)[ServiceStatus.UP]
    line = f"Checks done: {up}/{len(results)} up ({duration_ms:.0f}ms)"
    failing = failing_services(results)
    if failing:
        line += f"; not up: {', '.join(failing)}"
    return line
