"""
Homewatch Probes

Single-shot health checks, one per monitored service:
  - local: hypervisor, home automation, media server, NAS, internet
  - hive: coordination heartbeats and the shared database
  - external: WhatsApp bridge, Calendar GPT
"""

from homewatch.probes.base import ProbeFn, ProbeSpec

__all__ = ["ProbeFn", "ProbeSpec"]
