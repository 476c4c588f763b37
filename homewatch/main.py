"""
Homewatch — Main Entry Point

Starts the control surface (which owns the check loop), or runs a single
cycle with ``--once``.

Usage:
    python -m homewatch.main
    python -m homewatch.main --port 4000
    python -m homewatch.main --once
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import uvicorn

from homewatch.shared import settings
from homewatch.shared.logging import configure_file_logging, get_banner, setup_logging

logger = logging.getLogger("homewatch.main")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_UNHEALTHY = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="homewatch", description="Home infrastructure sentinel")
    parser.add_argument("--host", default=settings.HTTP_HOST, help="bind address")
    parser.add_argument("--port", type=int, default=settings.HTTP_PORT, help="bind port")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="logging level")
    parser.add_argument("--log-file", default="", help="also log to this file under the log directory")
    parser.add_argument(
        "--once",
        action="store_true",
        help="run a single check cycle, print the snapshot and exit",
    )
    return parser.parse_args(argv)


async def run_once() -> int:
    """One cycle without the HTTP server. Exit code reflects overall health."""
    from homewatch.api.main import build_orchestrator
    from homewatch.sentinel.models import OverallStatus
    from homewatch.storage.database import Database

    database = Database(settings.DB_PATH)
    orchestrator = build_orchestrator(database)
    try:
        snapshot = await orchestrator.run_cycle()
        await orchestrator.flush_notifications()
    finally:
        await database.close()

    print(json.dumps(snapshot.to_dict(), indent=2, default=str))
    return EXIT_OK if snapshot.overall is OverallStatus.HEALTHY else EXIT_UNHEALTHY


def serve(host: str, port: int, log_level: str) -> int:
    from homewatch.api.main import app
    from homewatch.probes.registry import build_default_probes

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    logger.info(get_banner(host, port, len(build_default_probes()), settings.CHECK_INTERVAL_SECONDS))
    asyncio.run(server.serve())
    if not server.started:
        logger.critical("Control surface failed to start on %s:%d", host, port)
        return EXIT_FATAL
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    if args.log_file:
        configure_file_logging(logging.getLogger("homewatch"), args.log_file)
    try:
        if args.once:
            return asyncio.run(run_once())
        return serve(args.host, args.port, args.log_level)
    except KeyboardInterrupt:
        return EXIT_OK
    except Exception:
        logger.exception("Fatal error")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
