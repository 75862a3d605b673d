"""
Timezone Utilities - Centralized clock access
The streak engine never reads the clock; callers pass dates obtained here.
"""
from datetime import date, datetime
import pytz

from habitstreak.core.config import settings


def get_app_tz():
    """
    Get the application timezone object

    Returns:
        pytz timezone configured by APP_TIMEZONE
    """
    return pytz.timezone(settings.APP_TIMEZONE)


def get_app_now() -> datetime:
    """
    Get current datetime in the application timezone

    Returns:
        Timezone-aware datetime object
    """
    return datetime.now(get_app_tz())


def get_today_date() -> date:
    """
    Get today's date in the application timezone

    Returns:
        date object for today
    """
    return get_app_now().date()
