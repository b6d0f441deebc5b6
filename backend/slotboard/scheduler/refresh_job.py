"""Runs every hour at minute 0: full refresh only (hides newly passed slots, shows newly ticked ones)."""
import logging

from slotboard.core.errors import StoreUnavailable
from slotboard.services.board import refresh_all

logger = logging.getLogger(__name__)


def run_refresh_job() -> None:
    try:
        refresh_all()
    except StoreUnavailable as e:
        logger.warning("Hourly refresh aborted, sheet unavailable (next tick retries): %s", e)
    except Exception as e:
        logger.exception("Hourly refresh job failed: %s", e)
