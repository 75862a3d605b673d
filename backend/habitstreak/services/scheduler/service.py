"""
Scheduler Service - Background scheduler lifecycle management
Handles starting, stopping, and configuring the APScheduler instance
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from habitstreak.core.constants import STREAK_EXPIRY_TIME, POINTS_RESET_TIME
from habitstreak.utils.timezone import get_app_tz
from .jobs import expire_broken_streaks, reset_weekly_points, reset_monthly_points

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def start_scheduler():
    """
    Start the background scheduler
    Registers the daily streak expiry and the weekly/monthly points resets
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return

    tz = get_app_tz()
    scheduler = BackgroundScheduler(timezone=tz)

    expiry_hour, expiry_minute = STREAK_EXPIRY_TIME
    reset_hour, reset_minute = POINTS_RESET_TIME

    scheduler.add_job(
        func=expire_broken_streaks,
        trigger=CronTrigger(hour=expiry_hour, minute=expiry_minute, timezone=tz),
        id='streak_expiry',
        name='Expire broken streaks',
        replace_existing=True
    )

    scheduler.add_job(
        func=reset_weekly_points,
        trigger=CronTrigger(day_of_week='mon', hour=reset_hour, minute=reset_minute, timezone=tz),
        id='weekly_points_reset',
        name='Reset weekly points',
        replace_existing=True
    )

    scheduler.add_job(
        func=reset_monthly_points,
        trigger=CronTrigger(day=1, hour=reset_hour, minute=reset_minute, timezone=tz),
        id='monthly_points_reset',
        name='Reset monthly points',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Scheduler started - streak expiry daily at {expiry_hour:02d}:{expiry_minute:02d} ({tz.zone})")


def stop_scheduler():
    """Stop the background scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")
