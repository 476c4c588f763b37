"""
Probe contract.

A probe is a single-shot callable producing one service's health result.
It may be a coroutine function or a plain function, and may return a
``ServiceResult`` or a plain mapping with a ``status`` key. Probes that
read the shared database declare it through ``ProbeSpec.requires_db``
and receive the resolved handle as their only argument.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Union

from homewatch.sentinel.models import ServiceResult

ProbeOutcome = Union[ServiceResult, Mapping[str, Any]]
ProbeFn = Callable[..., Union[ProbeOutcome, Awaitable[ProbeOutcome]]]


@dataclass(frozen=True)
class ProbeSpec:
    """A configured service and the probe that checks it."""

    name: str
    probe: ProbeFn
    requires_db: bool = False
    # Reported when the shared database handle could not be resolved this cycle.
    missing_dependency_reason: str = "no db"


def elapsed_ms(start: float) -> float:
    """Milliseconds since a ``time.monotonic()`` reading."""
    return (time.monotonic() - start) * 1000
