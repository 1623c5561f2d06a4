"""Civil-date helpers for a fixed reference timezone.

Dates travel through the dashboard as ``YYYY-MM-DD`` strings. The strings sort
lexicographically in calendar order, which the log range queries rely on.
"""

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_DATE_STRING_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Hard caps for date walks; a malformed range must never spin forever.
WINDOW_GUARD_DAYS = 40
EXPORT_GUARD_DAYS = 400


def _zone(zone: str) -> ZoneInfo:
    return ZoneInfo(zone)


def to_date_string(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_string(date_string: str) -> date:
    """Strict ``YYYY-MM-DD`` parse; raises ``ValueError`` on anything else."""
    if not isinstance(date_string, str) or not _DATE_STRING_RE.fullmatch(date_string):
        raise ValueError(f"invalid date string: {date_string!r}")
    year, month, day = date_string.split("-")
    return date(int(year), int(month), int(day))


def is_date_string(value: str) -> bool:
    try:
        parse_date_string(value)
    except (TypeError, ValueError):
        return False
    return True


def civil_date_in_zone(instant: datetime, zone: str) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return to_date_string(instant.astimezone(_zone(zone)).date())


def today_in_zone(zone: str, now: Optional[datetime] = None) -> str:
    return civil_date_in_zone(now or datetime.now(timezone.utc), zone)


def weekday_index(year: int, month: int, day: int, zone: str) -> int:
    """Monday=0 weekday of the civil date ``year-month-day`` in ``zone``."""
    return datetime(year, month, day, 12, tzinfo=_zone(zone)).weekday()


def weekday_name(date_string: str, zone: str) -> str:
    parsed = parse_date_string(date_string)
    return WEEKDAY_NAMES[weekday_index(parsed.year, parsed.month, parsed.day, zone)]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_days(date_string: str, days: int) -> str:
    return to_date_string(parse_date_string(date_string) + timedelta(days=days))


def date_range(start: str, end: str, limit: int = WINDOW_GUARD_DAYS) -> List[str]:
    """Inclusive walk from ``start`` to ``end``, stopping after ``limit`` days."""
    try:
        cursor = parse_date_string(start)
        last = parse_date_string(end)
    except (TypeError, ValueError):
        logger.warning("Skipping date walk over malformed range %r..%r", start, end)
        return []

    days: List[str] = []
    while cursor <= last and len(days) < limit:
        days.append(to_date_string(cursor))
        cursor += timedelta(days=1)
    return days


def last_n_days(end: str, count: int, limit: int = WINDOW_GUARD_DAYS) -> List[str]:
    """The ``count`` days ending at ``end``; past ``limit`` the oldest days are dropped."""
    count = min(count, limit)
    if count <= 0:
        return []
    return date_range(add_days(end, -(count - 1)), end, limit=limit)


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    return (
        to_date_string(date(year, month, 1)),
        to_date_string(date(year, month, days_in_month(year, month))),
    )


def week_bounds(date_string: str) -> Tuple[str, str]:
    parsed = parse_date_string(date_string)
    monday = parsed - timedelta(days=parsed.weekday())
    return to_date_string(monday), to_date_string(monday + timedelta(days=6))


def start_of_day(date_string: str, zone: str) -> datetime:
    return datetime.combine(parse_date_string(date_string), time(0, 0), tzinfo=_zone(zone))


def end_exclusive(date_string: str, zone: str) -> datetime:
    """Midnight that ends ``date_string`` in ``zone``."""
    return start_of_day(add_days(date_string, 1), zone)
