"""APScheduler setup for periodic outage polling and the daily expired-campaign sweep.

Jobs run as coroutines on the application's event loop, the same loop that
serves manual API triggers, so engine state is only ever touched from one
thread.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.config import settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def _run_poll():
    from app.services.orchestrator import orchestrator
    try:
        await orchestrator.poll_outages()
    except Exception as e:
        logger.error("Outage poll job failed: %s", e)


async def _run_cleanup():
    from app.services.orchestrator import orchestrator
    try:
        await orchestrator.cleanup_expired_campaigns()
    except Exception as e:
        logger.error("Campaign cleanup job failed: %s", e)


def start_scheduler():
    """Start the scheduler; must be called with the app's event loop running."""
    global _scheduler
    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        _run_poll,
        "interval",
        minutes=settings.poll_interval_minutes,
        id="outage_poll",
        name="Outage polling",
        max_instances=1,
    )

    _scheduler.add_job(
        _run_cleanup,
        "cron",
        hour=settings.cleanup_hour,
        minute=0,
        id="campaign_cleanup",
        name="Expired campaign cleanup",
        max_instances=1,
    )

    _scheduler.start()
    logger.info(
        "Scheduler started: poll every %d min, cleanup daily at %02d:00",
        settings.poll_interval_minutes,
        settings.cleanup_hour,
    )


def stop_scheduler():
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
