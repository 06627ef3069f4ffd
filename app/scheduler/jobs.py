"""APScheduler jobs — daily cleanup of old rejected provider applications."""

import logging
from datetime import datetime

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import get_settings
from app.infrastructure.database import SessionLocal

settings = get_settings()
logger = logging.getLogger(__name__)
tz = pytz.timezone(settings.TIMEZONE)

scheduler = AsyncIOScheduler(timezone=tz)


async def cleanup_rejected_job():
    """Daily job: delete rejected providers past the retention window."""
    from app.application.services.maintenance_service import cleanup_rejected_providers

    logger.info(f"Running rejected provider cleanup at {datetime.now(tz).strftime('%Y-%m-%d %H:%M')}")

    db = SessionLocal()
    try:
        deleted = cleanup_rejected_providers(db)
        logger.info(f"Cleanup removed {deleted} rejected provider(s)")
    except Exception:
        logger.exception("Rejected provider cleanup failed")
    finally:
        db.close()


def start_scheduler():
    """Start the APScheduler with the daily cleanup job."""
    scheduler.add_job(
        cleanup_rejected_job,
        trigger=CronTrigger(hour=settings.CLEANUP_HOUR, minute=0, timezone=tz),
        id="cleanup_rejected_providers",
        name=f"Rejected Provider Cleanup (Daily {settings.CLEANUP_HOUR:02d}:00)",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started — rejected provider cleanup daily at {settings.CLEANUP_HOUR:02d}:00 {settings.TIMEZONE}")


def stop_scheduler():
    """Stop the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
