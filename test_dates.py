"""Tests for the calendar date helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from pnf_checker.utils.dates import (
    add_days,
    add_months,
    days_in_month,
    is_leap_year,
    subtract_years,
    to_utc,
    to_utc_date,
)
from pnf_checker.utils.errors import ErrorType, PNFCheckerError


@pytest.mark.parametrize("year,expected", [(2024, True), (2023, False), (2000, True), (1900, False)])
def test_is_leap_year(year, expected):
    assert is_leap_year(year) is expected


@pytest.mark.parametrize("year,month,expected", [
    (2024, 2, 29),
    (2023, 2, 28),
    (2023, 4, 30),
    (2023, 6, 30),
    (2023, 9, 30),
    (2023, 11, 30),
    (2023, 1, 31),
    (2023, 12, 31),
])
def test_days_in_month(year, month, expected):
    assert days_in_month(year, month) == expected


def test_to_utc_date_accepts_real_days():
    result = to_utc_date(2024, 2, 29)

    assert result.ok
    assert result.value == date(2024, 2, 29)


@pytest.mark.parametrize("year,month,day", [
    (2023, 2, 29),
    (1900, 2, 29),
    (2023, 4, 31),
    (2023, 13, 1),
    (2023, 0, 10),
    (2023, 1, 0),
    (2023, 1, 32),
])
def test_to_utc_date_rejects_impossible_days(year, month, day):
    """Impossible combinations come back as INVALID_DATE, not exceptions."""
    result = to_utc_date(year, month, day)

    assert not result.ok
    assert result.value is None
    assert result.error.error_type == ErrorType.INVALID_DATE
    assert result.error.recoverable is True
    assert result.error.details == {"year": year, "month": month, "day": day}


def test_unwrap_of_failed_date_raises():
    with pytest.raises(PNFCheckerError):
        to_utc_date(2023, 2, 30).unwrap()


def test_to_utc_converts_aware_datetimes():
    plus_one = timezone(timedelta(hours=1))

    assert to_utc(datetime(2023, 4, 1, 0, 30, tzinfo=plus_one)) == date(2023, 3, 31)
    assert to_utc(datetime(2023, 4, 1, 23, 59)) == date(2023, 4, 1)
    assert to_utc(date(2023, 4, 1)) == date(2023, 4, 1)


@pytest.mark.parametrize("start,months,expected", [
    (date(2023, 6, 30), 6, date(2023, 12, 30)),
    (date(2024, 1, 15), -1, date(2023, 12, 15)),
    (date(2024, 2, 29), 12, date(2025, 2, 28)),
    (date(2024, 2, 29), 48, date(2028, 2, 29)),
])
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


@pytest.mark.parametrize("start,months,expected", [
    (date(2022, 3, 31), 6, date(2022, 10, 1)),
    (date(2023, 12, 31), 6, date(2024, 7, 1)),
    (date(2023, 8, 31), 6, date(2024, 3, 2)),
    (date(2023, 8, 31), -6, date(2023, 3, 3)),
    (date(2024, 1, 31), 1, date(2024, 3, 2)),
])
def test_add_months_rolls_surplus_days_into_next_month(start, months, expected):
    """Days past the end of a shorter target month carry over, they are not clamped."""
    assert add_months(start, months) == expected


def test_subtract_years_collapses_leap_day():
    assert subtract_years(date(2024, 2, 29), 1) == date(2023, 2, 28)
    assert subtract_years(date(2024, 2, 29), 4) == date(2020, 2, 29)
    assert subtract_years(date(2024, 6, 30), 3) == date(2021, 6, 30)


def test_add_days_crosses_month_end():
    assert add_days(date(2021, 6, 30), 1) == date(2021, 7, 1)
    assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
