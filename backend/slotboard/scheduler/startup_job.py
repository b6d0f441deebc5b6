"""Runs once in a background thread at boot: roll grids, clean up board messages, refresh."""
import logging

from slotboard.services.board import startup_sync

logger = logging.getLogger(__name__)


def run_startup_sync() -> None:
    try:
        bound = startup_sync()
        logger.info("Startup sync done: %s", bound)
    except Exception as e:
        logger.warning("Startup sync failed (hourly refresh will retry): %s", e, exc_info=True)
