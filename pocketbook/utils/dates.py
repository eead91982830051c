from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from ..config import get_settings


def app_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().timezone)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to UTC; naive values are assumed to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime) -> date:
    """Calendar day of ``value`` in the application zone."""
    return as_utc(value).astimezone(app_timezone()).date()


def local_today(now: datetime | None = None) -> date:
    return local_date(now or utcnow())


def day_start(day: date) -> datetime:
    """UTC instant of local midnight at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=app_timezone()).astimezone(timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC window ``[day 00:00, next day 00:00)`` in the application zone."""
    return day_start(day), day_start(day + timedelta(days=1))


def month_start_before(base: date, months: int) -> date:
    """First day of the calendar month ``months`` months before ``base``."""
    month = base.month - 1 - months
    year = base.year + month // 12
    month = month % 12 + 1
    return date(year, month, 1)


def iter_days(start: date, end: date):
    """Yield every day in ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
