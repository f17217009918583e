from datetime import date, datetime, timedelta

import pytest

from school_admin.core.dates import (
    date_ranges_overlap, days_between, is_date_in_range, is_valid_date, parse_date,
    validate_date_range
)
from school_admin.core.errors import InvalidDateRange

START = date(2024, 4, 1)


def test_parse_date_accepts_common_inputs():
    assert parse_date("2024-04-01") == START
    assert parse_date("2024-04-01T15:30:00Z") == START
    assert parse_date(datetime(2024, 4, 1, 23, 59)) == START
    assert parse_date(START) == START


@pytest.mark.parametrize("value", [None, "", "not-a-date", "2024-13-01", 20240401])
def test_parse_date_rejects_garbage(value):
    assert parse_date(value) is None
    assert not is_valid_date(value)


def test_days_between_is_absolute():
    assert days_between("2024-04-01", "2024-05-01") == 30
    assert days_between("2024-05-01", "2024-04-01") == 30


@pytest.mark.parametrize("days", [30, 365, 730])
def test_boundary_durations_are_accepted(days):
    end = START + timedelta(days=days)
    assert validate_date_range(START.isoformat(), end.isoformat()) == (START, end)


@pytest.mark.parametrize(
    "start, end, reason",
    [
        (None, "2025-03-31", "required"),
        ("2024-04-01", "", "required"),
        ("01/04/2024", "2025-03-31", "Invalid start date"),
        ("2024-04-01", "someday", "Invalid end date"),
        ("2024-04-01", "2024-04-01", "before end date"),
        ("2025-03-31", "2024-04-01", "before end date"),
        ("2024-04-01", "2024-04-30", "at least 30 days"),
        ("2024-04-01", "2026-04-02", "cannot exceed 730 days"),
    ],
)
def test_invalid_ranges_name_the_reason(start, end, reason):
    with pytest.raises(InvalidDateRange) as exc:
        validate_date_range(start, end)
    assert reason in exc.value.detail
    assert exc.value.status_code == 422


def test_time_of_day_is_ignored():
    start, end = validate_date_range("2024-04-01T23:00:00", "2024-05-01T01:00:00")
    assert (end - start).days == 30


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (("2024-04-01", "2025-03-31"), ("2025-04-01", "2026-03-31"), False),
        (("2024-04-01", "2025-03-31"), ("2025-03-31", "2026-03-31"), True),
        (("2024-04-01", "2025-03-31"), ("2024-06-01", "2024-08-31"), True),
        (("2024-04-01", "2025-03-31"), ("2023-01-01", "2024-04-01"), True),
        (("2024-04-01", "2025-03-31"), ("bad", "2026-03-31"), False),
    ],
)
def test_overlap_is_inclusive_and_symmetric(a, b, expected):
    assert date_ranges_overlap(a, b) is expected
    assert date_ranges_overlap(b, a) is expected


def test_is_date_in_range_inclusive():
    assert is_date_in_range("2024-04-01", "2024-04-01", "2025-03-31")
    assert is_date_in_range("2025-03-31T18:00:00", "2024-04-01", "2025-03-31")
    assert not is_date_in_range("2025-04-01", "2024-04-01", "2025-03-31")
