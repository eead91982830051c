"""In-process cron jobs for the API service.

Jobs:
  - Daily summary builder (``DAILY_SUMMARY_CRON``, default 00:01 in ``APP_TIMEZONE``)
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import get_settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

DAILY_SUMMARY_JOB_ID = "daily_summaries"


async def _run_daily_summaries() -> None:
    from .db import SessionLocal
    from .services.daily_summaries import run_daily_summaries

    try:
        report = await run_daily_summaries(SessionLocal)
    except Exception:
        logger.exception("Daily summary job failed")
        return
    if report.timed_out:
        logger.warning("Daily summary job for %s hit its time limit", report.date)


def start_scheduler() -> None:
    """Register the periodic jobs and start the scheduler."""
    settings = get_settings()
    if not settings.scheduler_enabled:
        logger.info("SCHEDULER_ENABLED is off; periodic jobs will not run in this process.")
        return
    if scheduler.running:
        return

    scheduler.add_job(
        _run_daily_summaries,
        CronTrigger.from_crontab(settings.daily_summary_cron, timezone=settings.timezone),
        id=DAILY_SUMMARY_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler started: daily_summaries (%s %s)", settings.daily_summary_cron, settings.timezone
    )


def shutdown_scheduler() -> None:
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
