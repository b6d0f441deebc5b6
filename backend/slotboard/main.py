"""
FastAPI app entrypoint.

Serves the Discord interactions endpoint and runs the board scheduler:
weekly roll (regenerate both week grids) and hourly refresh, both in the configured zone.
"""
import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from slotboard.api.routes import interactions
from slotboard.config import settings
from slotboard.core.constants import HOURLY_REFRESH_JOB_ID, WEEK_ROLL_JOB_ID
from slotboard.scheduler.refresh_job import run_refresh_job
from slotboard.scheduler.startup_job import run_startup_sync
from slotboard.scheduler.week_roll_job import run_week_roll_job

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone=settings.timezone)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_week_roll_job,
        CronTrigger(
            day_of_week=settings.week_roll_day_of_week,
            hour=settings.week_roll_hour,
            minute=0,
            timezone=settings.timezone,
        ),
        id=WEEK_ROLL_JOB_ID,
        replace_existing=True,
    )
    scheduler.add_job(
        run_refresh_job,
        CronTrigger(minute=0, timezone=settings.timezone),
        id=HOURLY_REFRESH_JOB_ID,
        replace_existing=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    register_jobs(_scheduler)
    _scheduler.start()
    app.state.scheduler = _scheduler

    # Roll grids, dedupe board messages and refresh without blocking startup.
    threading.Thread(target=run_startup_sync, daemon=True).start()
    logger.info(
        "Slotboard ready: channel=%s tz=%s weekly roll %s %02d:00",
        settings.discord_channel_id or "<unset>",
        settings.timezone,
        settings.week_roll_day_of_week,
        settings.week_roll_hour,
    )
    yield
    _scheduler.shutdown(wait=False)


app = FastAPI(title="Slotboard", version="0.1.0", lifespan=lifespan)

app.include_router(interactions.router, prefix="/discord", tags=["discord"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
