"""Date manipulation utilities"""

from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of a shorter month"""
    return from_date + relativedelta(months=months)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_until(target: date, today: date) -> int:
    """Whole days from today to target (negative once target has passed)"""
    return (target - today).days
