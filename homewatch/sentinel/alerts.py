"""
Homewatch Sentinel — Alert Debouncer

Per-service state machine that turns raw per-cycle results into confirmed
down / recovery events. A service must fail ``DEBOUNCE_THRESHOLD``
consecutive cycles before it is reported, and each incident is reported
exactly once. Any ``up`` observation clears the state.

The debouncer returns events as data; dispatching them is the
orchestrator's job.
"""

from __future__ import annotations

import json
import logging
from typing import Mapping

from homewatch.sentinel.models import (
    AlertEvent,
    AlertState,
    AlertType,
    ServiceResult,
    ServiceStatus,
)

logger = logging.getLogger("homewatch.alerts")

# Consecutive non-up observations required before a service is confirmed down.
DEBOUNCE_THRESHOLD = 2


class AlertStateStore:
    """Process-wide alert state, one entry per observed service."""

    def __init__(self) -> None:
        self._states: dict[str, AlertState] = {}

    def get(self, service: str) -> AlertState:
        """Return the state for ``service``, creating the default lazily."""
        state = self._states.get(service)
        if state is None:
            state = self._states[service] = AlertState()
        return state

    def snapshot(self) -> dict[str, AlertState]:
        """Copies of every state, safe to hand to readers."""
        return {
            name: AlertState(s.consecutive_failures, s.last_confirmed_status, s.alerted)
            for name, s in self._states.items()
        }

    def active_count(self) -> int:
        return sum(1 for s in self._states.values() if s.alerted)

    def __len__(self) -> int:
        return len(self._states)


def failure_detail(result: ServiceResult) -> str:
    """First non-empty of reason, error, then the serialised details."""
    return result.reason or result.error or json.dumps(result.details or {}, default=str)


class AlertDebouncer:
    """Consumes one result set per cycle and emits confirmed transitions."""

    def __init__(self, store: AlertStateStore | None = None, threshold: int = DEBOUNCE_THRESHOLD):
        self.store = store if store is not None else AlertStateStore()
        self.threshold = threshold

    def evaluate(self, results: Mapping[str, ServiceResult]) -> list[AlertEvent]:
        events: list[AlertEvent] = []
        for name, result in results.items():
            event = self._transition(name, result)
            if event is not None:
                logger.info("Alert %s: %s", event.type.value, name)
                events.append(event)
        return events

    def _transition(self, name: str, result: ServiceResult) -> AlertEvent | None:
        state = self.store.get(name)

        if not result.is_up:
            # down and degraded both count toward the same counter
            state.consecutive_failures += 1
            if state.consecutive_failures >= self.threshold and not state.alerted:
                state.alerted = True
                state.last_confirmed_status = ServiceStatus.DOWN
                message = f"🔴 {name} is DOWN\n{failure_detail(result)}".strip()
                return AlertEvent(type=AlertType.DOWN, service=name, message=message)
            return None

        event = None
        if state.alerted and state.last_confirmed_status is ServiceStatus.DOWN:
            event = AlertEvent(
                type=AlertType.RECOVERY, service=name, message=f"🟢 {name} is back UP"
            )
        state.reset()
        return event

    def active_alert_count(self) -> int:
        return self.store.active_count()

    def states(self) -> dict[str, AlertState]:
        return self.store.snapshot()
