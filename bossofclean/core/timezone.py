# bossofclean/core/timezone.py
"""
Timezone helpers.

Schedules and bookings store naive wall-clock dates and times. They are all
read as local time in settings.DEFAULT_TIMEZONE (America/New_York), so every
"now" comparison happens in that zone.
"""
from datetime import date, datetime, time

import pytz

from bossofclean.config.settings import get_settings


def get_service_timezone():
    return pytz.timezone(get_settings().DEFAULT_TIMEZONE)


def local_now() -> datetime:
    """Current aware datetime in the service timezone."""
    return datetime.now(get_service_timezone())


def to_local(dt: datetime) -> datetime:
    """
    Express a datetime in the service timezone.

    Naive values are taken to already be local wall-clock time.
    """
    tz = get_service_timezone()
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def local_today(now: datetime) -> date:
    return to_local(now).date()


def combine_local(day: date, at: time) -> datetime:
    """Aware datetime for a wall-clock date and time in the service timezone."""
    return get_service_timezone().localize(datetime.combine(day, at))
