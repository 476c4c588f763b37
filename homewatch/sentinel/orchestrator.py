"""
Homewatch Sentinel — Check Orchestrator

Runs the full probe set concurrently on a fixed interval, feeds the
results through the alert debouncer, dispatches alerts, derives the
overall status and publishes the latest snapshot.

Cycle:
  1. resolve the shared database handle once
  2. run every probe concurrently (fan-out / fan-in)
  3. evaluate alerts and hand them to the notifier
  4. derive the overall status and build the snapshot
  5. persist the snapshot
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Protocol, Sequence

from homewatch.notify.notifier import LogNotifier, Notifier
from homewatch.probes.base import ProbeSpec
from homewatch.sentinel.alerts import AlertDebouncer
from homewatch.sentinel.models import (
    AggregateSnapshot,
    AlertEvent,
    NotificationPriority,
    ResultSet,
    ServiceResult,
)
from homewatch.sentinel.runner import ProbeRunner, describe_error
from homewatch.sentinel.status import derive_overall_status, summarize
from homewatch.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("homewatch.orchestrator")

DEFAULT_INTERVAL_SECONDS = 300.0


class DependencyResolver(Protocol):
    async def get(self) -> Any: ...


class CheckOrchestrator:
    """
    Owns the check cycle and the latest snapshot.

    At most one cycle is in flight: a ``run_cycle()`` call made while a
    cycle is running joins it and receives the same snapshot. The latest
    snapshot is replaced in a single assignment, so readers never observe
    a half-built one.
    """

    def __init__(
        self,
        probes: Sequence[ProbeSpec],
        *,
        debouncer: AlertDebouncer | None = None,
        notifier: Notifier | None = None,
        store: SnapshotStore | None = None,
        database: DependencyResolver | None = None,
        runner: ProbeRunner | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        names = [spec.name for spec in probes]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate service names in probe set: {names}")

        self.probes = list(probes)
        self.debouncer = debouncer or AlertDebouncer()
        self.notifier = notifier or LogNotifier()
        self.store = store
        self.database = database
        self.runner = runner or ProbeRunner()
        self.interval_seconds = interval_seconds

        self._latest: AggregateSnapshot | None = None
        self._inflight: asyncio.Task[AggregateSnapshot] | None = None
        self._notifications: set[asyncio.Task[None]] = set()
        self._last_delivery: asyncio.Task[None] | None = None
        self._loop_task: asyncio.Task[None] | None = None
        self._stop = asyncio.Event()
        self.cycle_count = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def latest(self) -> AggregateSnapshot | None:
        return self._latest

    @property
    def cycle_in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> AggregateSnapshot:
        """Run one cycle, or join the one already in flight."""
        if not self.cycle_in_flight:
            self._inflight = asyncio.create_task(self._execute_cycle(), name="homewatch-cycle")
        else:
            logger.info("Cycle already in flight; joining it")
        # Shielded so a cancelled caller does not abort the cycle for everyone else.
        return await asyncio.shield(self._inflight)

    async def _execute_cycle(self) -> AggregateSnapshot:
        start = time.monotonic()
        logger.info("Running %d checks...", len(self.probes))

        db = await self._resolve_database()
        outcomes = await asyncio.gather(*(self._run_probe(spec, db) for spec in self.probes))
        results: ResultSet = {spec.name: result for spec, result in zip(self.probes, outcomes)}

        events = self.debouncer.evaluate(results)
        self._dispatch(events)

        duration_ms = (time.monotonic() - start) * 1000
        snapshot = AggregateSnapshot(
            overall=derive_overall_status(results),
            last_check=datetime.now(timezone.utc).isoformat(),
            check_duration_ms=duration_ms,
            services=results,
            alerts_active=self.debouncer.active_alert_count(),
        )
        self._latest = snapshot
        self.cycle_count += 1

        await self._persist(snapshot)
        logger.info(summarize(results, duration_ms))
        return snapshot

    async def _resolve_database(self) -> Any:
        if self.database is None:
            return None
        try:
            return await self.database.get()
        except Exception as exc:
            logger.error("Database resolution failed: %s", describe_error(exc))
            return None

    async def _run_probe(self, spec: ProbeSpec, db: Any) -> ServiceResult:
        if spec.requires_db:
            if db is None:
                return ServiceResult.down(reason=spec.missing_dependency_reason)
            return await self.runner.run(spec.name, spec.probe, db)
        return await self.runner.run(spec.name, spec.probe)

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _dispatch(self, events: list[AlertEvent]) -> None:
        """
        Hand events to the notifier without holding up the cycle.

        Deliveries are chained, so events reach the channel in the order the
        cycles produced them even when the channel is slow.
        """
        if not events:
            return
        task = asyncio.create_task(
            self._deliver(events, self._last_delivery), name="homewatch-notify"
        )
        self._last_delivery = task
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _deliver(
        self, events: list[AlertEvent], previous: asyncio.Task[None] | None = None
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        for event in events:
            try:
                await self.notifier.notify(event.title, event.message, event.priority)
            except Exception as exc:
                logger.error("Notification failed for %s: %s", event.service, describe_error(exc))

    async def flush_notifications(self) -> None:
        """Wait for every notification dispatched so far."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    async def _persist(self, snapshot: AggregateSnapshot) -> None:
        if self.store is None:
            return
        try:
            await self.store.save(snapshot)
        except Exception as exc:
            logger.error("Failed to save snapshot: %s", describe_error(exc))

    async def announce_online(self) -> None:
        """Send the startup notice; failure is logged only."""
        minutes = self.interval_seconds / 60
        try:
            await self.notifier.notify(
                "🛡️ Homewatch Online",
                f"Monitoring {len(self.probes)} services every {minutes:g} min",
                NotificationPriority.NORMAL,
            )
        except Exception as exc:
            logger.error("Startup notification failed: %s", describe_error(exc))

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def start(self, *, announce: bool = False) -> None:
        """
        Start the timer loop; the first cycle runs immediately.

        With ``announce`` the startup notice is sent once the first cycle
        has finished.
        """
        if self.running:
            return
        self._stop.clear()
        self._loop_task = asyncio.create_task(
            self._run_loop(announce), name="homewatch-scheduler"
        )
        logger.info("Check loop started (interval=%gs)", self.interval_seconds)

    async def stop(self) -> None:
        self._stop.set()
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        await self.flush_notifications()
        logger.info("Check loop stopped")

    async def _run_loop(self, announce: bool = False) -> None:
        loop = asyncio.get_running_loop()
        next_run = loop.time()
        while not self._stop.is_set():
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Check cycle failed")
            if announce:
                announce = False
                await self.announce_online()

            next_run += self.interval_seconds
            delay = next_run - loop.time()
            if delay <= 0:
                # Overran the interval; start the next cycle now and re-anchor the timer.
                next_run = loop.time()
                continue
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
