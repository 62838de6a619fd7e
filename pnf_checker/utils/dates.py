"""Calendar date helpers operating on UTC calendar days."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Union

from dateutil.relativedelta import relativedelta

from .errors import Result, invalid_date

logger = logging.getLogger(__name__)

# A calendar day with no time component, read as UTC midnight.
CalendarDate = date

_THIRTY_DAY_MONTHS = {4, 6, 9, 11}


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` (1-12) of ``year``."""
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if month in _THIRTY_DAY_MONTHS:
        return 30
    return 31


def to_utc_date(year: int, month: int, day: int) -> Result[CalendarDate]:
    """
    Construct a calendar date, rejecting days that do not exist.

    Args:
        year: Four digit year
        month: Month number (1-12)
        day: Day of month

    Returns:
        Result holding the date, or an INVALID_DATE error context
    """
    components = {"year": year, "month": month, "day": day}

    if not 1 <= year <= 9999:
        logger.warning(f"Rejected date with year out of range: {components}")
        return Result.failure(invalid_date(f"Year {year} is out of range.", components))

    if not 1 <= month <= 12:
        logger.warning(f"Rejected date with invalid month: {components}")
        return Result.failure(invalid_date(f"Month {month} is not between 1 and 12.", components))

    max_day = days_in_month(year, month)
    if not 1 <= day <= max_day:
        logger.warning(f"Rejected date with invalid day: {components}")
        return Result.failure(
            invalid_date(f"Day {day} does not exist in {year}-{month:02d} (max {max_day}).", components)
        )

    return Result.success(date(year, month, day))


def to_utc(value: Union[date, datetime]) -> CalendarDate:
    """
    Normalize a date or datetime to its UTC calendar day.

    Timezone-aware datetimes are converted to UTC first. Naive datetimes keep
    their own calendar components.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def add_months(value: CalendarDate, months: int) -> CalendarDate:
    """
    Add calendar months.

    The day of month is kept. When the target month is shorter the surplus
    days roll into the following month (2022-03-31 + 6 months is
    2022-10-01). Whole-year shifts of Feb 29 land on Feb 28 in non-leap
    years, as subtract_years does (2024-02-29 + 12 months is 2025-02-28).
    """
    year, month_index = divmod(value.year * 12 + value.month - 1 + months, 12)
    month = month_index + 1

    if months % 12 == 0:
        return value + relativedelta(years=months // 12)

    return date(year, month, 1) + timedelta(days=value.day - 1)


def subtract_years(value: CalendarDate, years: int) -> CalendarDate:
    """Same month and day ``years`` earlier; Feb 29 becomes Feb 28 in non-leap years."""
    return value - relativedelta(years=years)


def add_days(value: CalendarDate, days: int) -> CalendarDate:
    return value + timedelta(days=days)


def today_utc() -> CalendarDate:
    return datetime.now(timezone.utc).date()
