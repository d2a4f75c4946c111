"""Local calendar-date helpers.

Every date in the ledger is a plain calendar day with no time of day.
Strings are parsed strictly as ``YYYY-MM-DD`` into :class:`datetime.date`
values, so comparisons can never be shifted to the adjacent day by a
timezone offset or a daylight-saving change.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from .config import DISPLAY_DATE_FORMAT
from .exceptions import InvalidDateFormat

DATE_FORMAT = '%Y-%m-%d'
_ISO_DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2}')

DateLike = Union[str, date]


def today() -> date:
    """Return today's date in the local timezone."""
    return date.today()


def parse_date(value: DateLike) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    ``date`` values are returned unchanged and ``datetime`` values are
    reduced to their calendar day, so callers can pass either form.

    Raises:
        InvalidDateFormat: If the value is empty, malformed or not a real
            calendar date (e.g. ``2024-02-30``).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.fullmatch(value):
        raise InvalidDateFormat(value)
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateFormat(value) from exc


def parse_optional_date(value: Optional[DateLike]) -> Optional[date]:
    """Parse ``value`` unless it is ``None`` or an empty string."""
    if value is None or value == '':
        return None
    return parse_date(value)


def format_date(d: DateLike) -> str:
    return parse_date(d).strftime(DATE_FORMAT)


def display_format(d: Optional[DateLike], fmt: str = DISPLAY_DATE_FORMAT) -> str:
    """Human-facing representation, e.g. ``'Jan 05, 2024'``.

    An empty value renders as ``''``; that only happens for form fields
    that have never been filled in.
    """
    if d is None or d == '':
        return ''
    return parse_date(d).strftime(fmt)


def days_between_inclusive(start: DateLike, end: DateLike) -> int:
    """Number of calendar days from ``start`` to ``end``, counting both ends.

    >>> days_between_inclusive('2024-01-01', '2024-01-05')
    5
    """
    delta = (parse_date(end) - parse_date(start)).days + 1
    return max(0, delta)


def add_days(d: DateLike, n: int) -> date:
    return parse_date(d) + timedelta(days=n)


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: DateLike, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    d = parse_date(d)
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def add_years(d: DateLike, n: int) -> date:
    return add_months(d, 12 * n)


def same_period(a: DateLike, b: DateLike, period: str) -> bool:
    """Whether two dates fall in the same day, ISO week, month or year."""
    a, b = parse_date(a), parse_date(b)
    if period == 'daily':
        return a == b
    if period == 'weekly':
        return a.isocalendar()[:2] == b.isocalendar()[:2]
    if period == 'monthly':
        return (a.year, a.month) == (b.year, b.month)
    if period == 'yearly':
        return a.year == b.year
    raise ValueError(f"Unknown period: {period!r}")


def count_dates_in_range(dates: Iterable[DateLike], start: DateLike, end: DateLike) -> int:
    """Count distinct dates lying within ``[start, end]``."""
    start, end = parse_date(start), parse_date(end)
    return len({d for d in map(parse_date, dates) if start <= d <= end})
