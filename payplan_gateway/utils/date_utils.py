"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def last_day_of_month(value: date) -> int:
    """Number of days in the month containing value"""
    return calendar.monthrange(value.year, value.month)[1]


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's end"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def with_clamped_day(value: date, day: int) -> date:
    """Same month as value, day limited to 1..last day of that month"""
    return value.replace(day=max(1, min(day, last_day_of_month(value))))
