"""
Service for timezone conversions and business-day boundaries.
"""
from typing import Optional, Tuple
from datetime import datetime, date, time, timezone
import pytz

from tillkeeper.core.config import settings

# Inclusive end-of-day boundary used for date range filters
END_OF_DAY = time(23, 59, 59, 999000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime. Naive values (e.g. read back from SQLite) are assumed UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_business_timezone(timezone_str: Optional[str] = None):
    """Resolve the business timezone, falling back to UTC if the name is invalid."""
    try:
        return pytz.timezone(timezone_str or settings.BUSINESS_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def get_utc_range_for_date_range(
    start_date: date,
    end_date: date,
    timezone_str: Optional[str] = None,
) -> Tuple[datetime, datetime]:
    """
    Return (start_utc, end_utc) for an inclusive local date range.
    start is local midnight of start_date, end is 23:59:59.999 local on end_date.
    """
    tz = get_business_timezone(timezone_str)
    start_local = tz.localize(datetime.combine(start_date, time.min))
    end_local = tz.localize(datetime.combine(end_date, END_OF_DAY))
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)
