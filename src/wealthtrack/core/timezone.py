"""Timezone and calendar-month utilities."""

from datetime import date, datetime
from typing import Iterator, Optional, Union

import pytz
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from wealthtrack.config.settings import get_settings


def local_tz() -> pytz.BaseTzInfo:
    """Return the configured local timezone."""
    return pytz.timezone(get_settings().timezone)


def now_local() -> datetime:
    """Return current time in the configured timezone."""
    return datetime.now(local_tz())


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the configured timezone."""
    tz = local_tz()
    if dt.tzinfo is None:
        # Assume naive datetime is already local
        return tz.localize(dt)
    return dt.astimezone(tz)


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse a date, datetime or ISO-like string into a date; None when empty."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date_parser.parse(text).date()


def month_key(d: date) -> str:
    """Return the YYYY-MM period key for a date."""
    return f"{d.year:04d}-{d.month:02d}"


def month_end(key: str) -> date:
    """Return the last calendar day of a YYYY-MM period."""
    year, month = (int(part) for part in key.split("-"))
    return date(year, month, 1) + relativedelta(months=1, days=-1)


def shift_month(key: str, months: int) -> str:
    """Return the period key `months` away from `key`."""
    year, month = (int(part) for part in key.split("-"))
    return month_key(date(year, month, 1) + relativedelta(months=months))


def iter_months(start: date, end: date) -> Iterator[str]:
    """Yield every period key from start's month to end's month inclusive."""
    current = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    while current <= last:
        yield month_key(current)
        current += relativedelta(months=1)
