"""
Photon crawler entrypoint.

Usage::

    photon config.toml                 # run once and exit
    photon config.toml --interval 3600 # run every hour until SIGTERM/SIGINT

One-shot mode loads the config file, runs the topology once and exits with
status 0, or logs the error and exits with status 1.

Scheduled mode reloads the config file before every run, so ``today`` and
``yesterday`` move with the calendar, and keeps going when a run fails.
SIGTERM/SIGINT set a shared asyncio.Event; the current run finishes and the
loop exits.

A HealthWriter (``PHOTON_HEALTH_PATH``) records the outcome of every run.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from photon.src import config, topology
from photon.src.health import HealthWriter
from photon.src.log import configure_logging
from photon.src.settings import PhotonSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photon",
        description="Collect energy data from RTE and write it to sinks.",
    )
    parser.add_argument("config_file", type=Path, help="TOML topology file")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        metavar="SECONDS",
        help="run every SECONDS until stopped (default: PHOTON_RUN_INTERVAL_S, "
        "0 runs once)",
    )
    return parser


# ---------------------------------------------------------------------------
# Single run
# ---------------------------------------------------------------------------


async def run_once(config_path: Path, health: HealthWriter | None = None) -> int:
    """Load the config, run the topology once, and close its sinks.

    Returns:
        Number of points delivered.

    Raises:
        Exception: Whatever the config loader, a source or a sink raised.
    """
    try:
        topo = config.read(config_path)
        try:
            points = await topology.run(topo)
        finally:
            await topo.close()
    except Exception as exc:
        if health is not None:
            health.record_failure(exc)
        raise

    logger.info("Run complete: %d points delivered", len(points))
    if health is not None:
        health.record_success(len(points))
    return len(points)


# ---------------------------------------------------------------------------
# Scheduled loop
# ---------------------------------------------------------------------------


async def run_loop(
    *,
    config_path: Path,
    interval_s: float,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None = None,
) -> None:
    """Run the topology every *interval_s* seconds until shutdown.

    A failed run is logged and does not stop the loop.
    """
    logger.info("Run loop started (interval=%ss)", interval_s)
    while not shutdown_event.is_set():
        try:
            await run_once(config_path, health)
        except Exception:
            logger.error("Run failed", exc_info=True)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval_s)
    logger.info("Run loop stopped")


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging, and run.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = PhotonSettings()
    except ValidationError as exc:
        configure_logging()
        logger.error("Invalid environment settings: %s", exc)
        return 1

    configure_logging(settings.log_level)

    interval = args.interval if args.interval is not None else settings.run_interval_s
    health = HealthWriter(settings.health_path) if settings.health_path else None

    logger.info(
        "Photon starting with config_file=%s, interval_s=%s, health_path=%s",
        args.config_file,
        interval,
        settings.health_path,
    )

    if interval <= 0:
        try:
            await run_once(args.config_file, health)
        except Exception:
            logger.error("Run failed", exc_info=True)
            return 1
        return 0

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: _handle_signal(shutdown_event))

    await run_loop(
        config_path=args.config_file,
        interval_s=interval,
        shutdown_event=shutdown_event,
        health=health,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Synchronous entrypoint for the ``photon`` console script."""
    sys.exit(asyncio.run(async_main(argv)))


if __name__ == "__main__":
    main()
