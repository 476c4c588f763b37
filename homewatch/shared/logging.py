"""
Homewatch — Shared Logging Configuration

Centralized logging setup for all Homewatch components.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .settings import LOG_DIR, LOG_LEVEL


# =============================================================================
# Log Format
# =============================================================================
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


# =============================================================================
# Setup
# =============================================================================
def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the sentinel process."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def configure_file_logging(
    logger: logging.Logger,
    filename: str,
    max_bytes: int = 5_000_000,  # 5MB
    backup_count: int = 3,
) -> None:
    """
    Add file logging to a logger with rotation.

    Args:
        logger: Logger to configure
        filename: Name of the log file (will be in LOG_DIR)
        max_bytes: Maximum file size before rotation
        backup_count: Number of backup files to keep
    """
    log_path = Path(LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)


# =============================================================================
# Banner
# =============================================================================
def get_banner(host: str, port: int, service_count: int, interval_seconds: float) -> str:
    """Generate the startup banner."""
    return f"""
  Homewatch sentinel
  HTTP API  : {host}:{port}/api
  Services  : {service_count}
  Interval  : {interval_seconds:g}s
"""
