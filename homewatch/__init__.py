"""
Homewatch — Home Infrastructure Sentinel

Periodically probes a fixed set of services, aggregates their health into
one snapshot and raises/clears debounced alerts through a push channel.

Main Components:
- homewatch.sentinel: Probe runner, check orchestrator, alert debouncer
- homewatch.probes: Local, coordination and external service probes
- homewatch.notify: Push notification delivery
- homewatch.storage: Shared database handle and snapshot store
- homewatch.api: FastAPI control surface
- homewatch.shared: Settings, logging, errors

Usage:
    python -m homewatch.main
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
