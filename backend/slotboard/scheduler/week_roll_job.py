"""Runs weekly (Sunday 23:00 local by default): regenerate both week grids, then refresh the board."""
import logging

from slotboard.core.errors import StoreInconsistent, StoreUnavailable
from slotboard.services.board import refresh_all, roll_weeks

logger = logging.getLogger(__name__)


def run_week_roll_job() -> None:
    try:
        roll_weeks()
        refresh_all()
    except StoreInconsistent as e:
        logger.error("Week roll skipped, sheet inconsistent: %s", e)
    except StoreUnavailable as e:
        logger.warning("Week roll aborted, sheet unavailable (next run retries): %s", e)
    except Exception as e:
        logger.exception("Week roll job failed: %s", e)
