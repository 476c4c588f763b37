"""
Default probe set.

Builds the statically known list of monitored services from settings.
The order here is the order services appear in snapshots.
"""

from __future__ import annotations

from homewatch.probes.base import ProbeSpec
from homewatch.probes.external import ExternalProbes
from homewatch.probes.hive import HiveProbes
from homewatch.probes.local import LocalProbes
from homewatch.shared import settings


def build_default_probes() -> list[ProbeSpec]:
    local = LocalProbes(
        proxmox_host=settings.PROXMOX_HOST,
        proxmox_node=settings.PROXMOX_NODE,
        proxmox_token_id=settings.PROXMOX_TOKEN_ID,
        proxmox_token_secret=settings.PROXMOX_TOKEN_SECRET,
        ha_host=settings.HA_HOST,
        ha_token=settings.HA_TOKEN,
        ha_port=settings.HA_PORT,
        plex_host=settings.PLEX_HOST,
        plex_port=settings.PLEX_PORT,
        dsm_host=settings.DSM_HOST,
        dsm_port=settings.DSM_PORT,
        internet_dns_name=settings.INTERNET_DNS_NAME,
        internet_url=settings.INTERNET_PROBE_URL,
    )
    hive = HiveProbes(max_heartbeat_age_minutes=settings.HEARTBEAT_MAX_AGE_MINUTES)
    external = ExternalProbes(
        evolution_url=settings.EVOLUTION_API_URL,
        evolution_api_key=settings.EVOLUTION_API_KEY,
        whatsapp_instances=settings.WHATSAPP_INSTANCES,
        calendar_gpt_url=settings.CALENDAR_GPT_URL,
        calendar_gpt_api_key=settings.CALENDAR_GPT_API_KEY,
    )

    return [
        ProbeSpec("proxmox", local.check_proxmox),
        ProbeSpec("homeassistant", local.check_home_assistant),
        ProbeSpec("plex", local.check_plex),
        ProbeSpec("dsm", local.check_dsm),
        ProbeSpec("internet", local.check_internet),
        ProbeSpec("queen", hive.check_queen, requires_db=True),
        ProbeSpec("hive_monitor", hive.check_hive_monitor, requires_db=True),
        ProbeSpec("workers", hive.check_workers, requires_db=True),
        ProbeSpec(
            "database",
            hive.check_database,
            requires_db=True,
            missing_dependency_reason="connection failed",
        ),
        ProbeSpec("whatsapp", external.check_whatsapp),
        ProbeSpec("calendar_gpt", external.check_calendar_gpt),
    ]
