"""Week and month keys.

A week is identified by the date of the Friday that ends it (``YYYY-MM-DD``).
A month key is ``YYYY-MM``; the weeks of a month are the Fridays that fall
inside it, so a month holds 4 or 5 weeks.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE, MONTH_KEY_FORMAT, WEEK_END_WEEKDAY, WEEK_KEY_FORMAT
from ..core.exceptions import ValidationError

_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_WEEK_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Current time in the HRM timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(ZoneInfo(tz_name))


def today_local(tz_name: str = DEFAULT_TIMEZONE) -> date:
    return now_local(tz_name).date()


# -------- Months --------
def normalize_month_key(month_key: str) -> str:
    """Validated month key with surrounding whitespace removed."""
    value = month_key.strip() if isinstance(month_key, str) else ""
    if not _MONTH_KEY_RE.match(value):
        raise ValidationError(f"Invalid month key {month_key!r} (expected YYYY-MM)")
    return value


def parse_month_key(month_key: str) -> tuple[int, int]:
    year, month = normalize_month_key(month_key).split("-")
    return int(year), int(month)


def month_key_for(day: date) -> str:
    return day.strftime(MONTH_KEY_FORMAT)


def month_date_range(month_key: str) -> tuple[date, date]:
    year, month = parse_month_key(month_key)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_month_key(month_key: str) -> str:
    start, _ = month_date_range(month_key)
    return month_key_for(start - timedelta(days=1))


def format_month_display(month_key: str) -> str:
    """``2026-01`` -> ``January 2026``."""
    start, _ = month_date_range(month_key)
    return f"{calendar.month_name[start.month]} {start.year}"


def month_options(*, now: date, count: int) -> list[dict]:
    """Last ``count`` months (current first) for select boxes."""
    out: list[dict] = []
    year, month = now.year, now.month
    for _ in range(max(count, 0)):
        key = f"{year:04d}-{month:02d}"
        out.append({"value": key, "label": format_month_display(key)})
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return out


# -------- Weeks --------
def week_key_for(friday: date) -> str:
    return friday.strftime(WEEK_KEY_FORMAT)


def normalize_week_key(week_key: str) -> str:
    return week_key_for(parse_week_key(week_key))


def parse_week_key(week_key: str) -> date:
    value = week_key.strip() if isinstance(week_key, str) else ""
    if not _WEEK_KEY_RE.match(value):
        raise ValidationError(f"Invalid week key {week_key!r} (expected YYYY-MM-DD)")
    try:
        day = parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid week key {week_key!r}")
    if day.weekday() != WEEK_END_WEEKDAY:
        raise ValidationError(f"Week key {week_key} is not a Friday")
    return day


def friday_on_or_after(day: date) -> date:
    return day + timedelta(days=(WEEK_END_WEEKDAY - day.weekday()) % 7)


def friday_on_or_before(day: date) -> date:
    return day - timedelta(days=(day.weekday() - WEEK_END_WEEKDAY) % 7)


def current_week_key(now: Optional[datetime] = None, *, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Most recent Friday (today when today is Friday)."""
    current = now or now_local(tz_name)
    return week_key_for(friday_on_or_before(current.date()))


def list_friday_week_keys(month_key: str) -> list[str]:
    start, end = month_date_range(month_key)
    out: list[str] = []
    day = friday_on_or_after(start)
    while day <= end:
        out.append(week_key_for(day))
        day += timedelta(days=7)
    return out


def expected_weeks_count(month_key: str) -> int:
    return len(list_friday_week_keys(month_key))


def month_key_from_week_key(week_key: str) -> str:
    return month_key_for(parse_week_key(week_key))


def week_label(week_key: str) -> str:
    """``Week-N`` position of the week inside its month."""
    keys = list_friday_week_keys(month_key_from_week_key(week_key))
    return f"Week-{keys.index(week_key) + 1}"
