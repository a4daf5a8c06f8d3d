from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from src.hrm_system.hrm_system.common import datetime_utils as dt
from src.hrm_system.hrm_system.core.exceptions import ValidationError

DHAKA = ZoneInfo("Asia/Dhaka")


def test_month_weeks_are_the_fridays_inside_the_month():
    assert dt.list_friday_week_keys("2026-01") == [
        "2026-01-02",
        "2026-01-09",
        "2026-01-16",
        "2026-01-23",
        "2026-01-30",
    ]
    assert dt.list_friday_week_keys("2026-02") == ["2026-02-06", "2026-02-13", "2026-02-20", "2026-02-27"]
    assert dt.expected_weeks_count("2026-01") == 5
    assert dt.expected_weeks_count("2026-02") == 4


def test_week_belongs_to_the_month_of_its_friday():
    # Mon 29 Dec 2025 .. Fri 2 Jan 2026 is a January week
    assert dt.month_key_from_week_key("2026-01-02") == "2026-01"
    assert "2026-01-02" not in dt.list_friday_week_keys("2025-12")


@pytest.mark.parametrize("bad", ["2026-01-08", "2026-1-9", "", "2026-02-30"])
def test_invalid_week_keys_are_rejected(bad):
    with pytest.raises(ValidationError):
        dt.parse_week_key(bad)


@pytest.mark.parametrize("bad", ["2026-13", "2026-00", "26-01", "2026/01", None, 202601])
def test_invalid_month_keys_are_rejected(bad):
    with pytest.raises(ValidationError):
        dt.parse_month_key(bad)


def test_previous_month_crosses_year_boundary():
    assert dt.previous_month_key("2026-01") == "2025-12"
    assert dt.previous_month_key("2026-03") == "2026-02"


def test_week_label_is_position_in_month():
    assert dt.week_label("2026-01-02") == "Week-1"
    assert dt.week_label("2026-01-16") == "Week-3"
    assert dt.week_label("2026-01-30") == "Week-5"


def test_current_week_key_is_most_recent_friday():
    assert dt.current_week_key(datetime(2026, 1, 14, 12, 0, tzinfo=DHAKA)) == "2026-01-09"
    assert dt.current_week_key(datetime(2026, 1, 16, 8, 0, tzinfo=DHAKA)) == "2026-01-16"


def test_month_options_newest_first():
    options = dt.month_options(now=date(2026, 2, 10), count=3)
    assert [o["value"] for o in options] == ["2026-02", "2026-01", "2025-12"]
    assert options[0]["label"] == "February 2026"


def test_keys_are_normalized():
    assert dt.normalize_month_key(" 2026-02\n") == "2026-02"
    assert dt.normalize_week_key(" 2026-02-06 ") == "2026-02-06"
    with pytest.raises(ValidationError):
        dt.normalize_week_key(20260206)
