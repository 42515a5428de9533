"""
Time helpers.
Timestamps are stored in UTC and converted to the user's timezone for display.
"""
from datetime import datetime, timezone
import pytz
from flask import current_app


def utcnow() -> datetime:
    """Current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt):
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_user_timezone(dt: datetime, user=None) -> datetime:
    """
    Convert a UTC (or naive-as-UTC) datetime to the user's timezone.

    Falls back to ``SYSTEM_TIMEZONE`` and then UTC when the user has no
    usable timezone.
    """
    if dt is None:
        return None

    dt = ensure_utc(dt)

    tz_name = current_app.config.get('SYSTEM_TIMEZONE', 'UTC')
    user_tz = getattr(user, 'timezone', None) if user is not None else None
    if user_tz:
        tz_name = user_tz

    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        current_app.logger.warning("Unknown timezone '%s', using UTC", tz_name)
        tz = pytz.UTC

    return dt.astimezone(tz)


def format_user_time(dt: datetime, user=None, fmt: str = '%Y-%m-%d %H:%M') -> str:
    """Format a datetime for display in the user's timezone."""
    local_dt = to_user_timezone(dt, user)
    if not local_dt:
        return ""
    return local_dt.strftime(fmt)
