"""
Homewatch — Shared Settings

Central configuration for the sentinel process and its probes.
Load from environment variables with sensible defaults.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


# =============================================================================
# Control Surface (HTTP)
# =============================================================================
HTTP_HOST: str = os.environ.get("HOMEWATCH_HTTP_HOST", "0.0.0.0")
HTTP_PORT: int = _env_int("PORT", _env_int("HOMEWATCH_HTTP_PORT", 3333))


# =============================================================================
# Check Cycle
# =============================================================================
# Seconds between cycles. CHECK_INTERVAL_MS is still honoured for old deployments.
_legacy_interval_ms = _env_int("CHECK_INTERVAL_MS", 0)
CHECK_INTERVAL_SECONDS: float = _env_float(
    "HOMEWATCH_CHECK_INTERVAL",
    _legacy_interval_ms / 1000 if _legacy_interval_ms else 300.0,
)

# Orchestrator-level per-probe timeout. 0 disables it (probes rely on their own I/O timeouts).
PROBE_TIMEOUT_SECONDS: Optional[float] = _env_float("HOMEWATCH_PROBE_TIMEOUT", 0.0) or None

# Coordination heartbeats older than this are considered stale.
HEARTBEAT_MAX_AGE_MINUTES: float = _env_float("HOMEWATCH_HEARTBEAT_MAX_AGE_MIN", 10.0)


# =============================================================================
# Storage
# =============================================================================
DB_PATH: str = os.environ.get("HOMEWATCH_DB_PATH", "data/homewatch.db")
SNAPSHOT_DOCUMENT_ID: str = os.environ.get("HOMEWATCH_SNAPSHOT_ID", "homewatch_latest")


# =============================================================================
# Notifications (Pushover relay hosted by the Calendar GPT service)
# =============================================================================
CALENDAR_GPT_URL: str = os.environ.get("CALENDAR_GPT_URL", "")
CALENDAR_GPT_API_KEY: str = os.environ.get("CALENDAR_GPT_API_KEY", "")
NOTIFY_TIMEOUT_SECONDS: float = _env_float("HOMEWATCH_NOTIFY_TIMEOUT", 10.0)


# =============================================================================
# Local Infrastructure Probes
# =============================================================================
PROXMOX_HOST: str = os.environ.get("PROXMOX_HOST", "192.168.50.122")
PROXMOX_NODE: str = os.environ.get("PROXMOX_NODE", "pve")
PROXMOX_TOKEN_ID: str = os.environ.get("PROXMOX_TOKEN_ID", "")
PROXMOX_TOKEN_SECRET: str = os.environ.get("PROXMOX_TOKEN_SECRET", "")

HA_HOST: str = os.environ.get("HA_HOST", "192.168.50.50")
HA_TOKEN: str = os.environ.get("HA_TOKEN", "")
HA_PORT: int = _env_int("HA_PORT", 8123)

PLEX_HOST: str = os.environ.get("PLEX_HOST", "192.168.50.50")
PLEX_PORT: int = _env_int("PLEX_PORT", 32400)

DSM_HOST: str = os.environ.get("DSM_HOST", "192.168.50.100")
DSM_PORT: int = _env_int("DSM_PORT", 5000)

INTERNET_DNS_NAME: str = os.environ.get("HOMEWATCH_INTERNET_DNS", "google.com")
INTERNET_PROBE_URL: str = os.environ.get(
    "HOMEWATCH_INTERNET_URL", "https://www.google.com/generate_204"
)


# =============================================================================
# External API Probes
# =============================================================================
EVOLUTION_API_URL: str = os.environ.get("EVOLUTION_API_URL", "")
EVOLUTION_API_KEY: str = os.environ.get("EVOLUTION_API_KEY", "")
WHATSAPP_INSTANCES: list[str] = [
    name.strip()
    for name in os.environ.get(
        "HOMEWATCH_WHATSAPP_INSTANCES", "personal-whatsapp,business-whatsapp"
    ).split(",")
    if name.strip()
]


# =============================================================================
# Logging
# =============================================================================
LOG_LEVEL: str = os.environ.get("HOMEWATCH_LOG_LEVEL", "INFO")
LOG_DIR: str = os.environ.get("HOMEWATCH_LOG_DIR", "logs")
