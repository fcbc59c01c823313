"""Calendar helpers for correction periods.

Month arithmetic clamps to the end of the month (31/01 + 1 month = 29/02 in
a leap year), via dateutil.relativedelta.
"""

from datetime import date

from dateutil.relativedelta import relativedelta

DAYS_PER_YEAR = 365


def add_months(value: date, months: int) -> date:
    return value + relativedelta(months=months)


def add_years(value: date, years: int) -> date:
    return value + relativedelta(years=years)


def span_in_years(start: date, end: date) -> float:
    """Approximate span in 365-day years, used only to decide pagination."""
    return (end - start).days / DAYS_PER_YEAR


def fetch_window(period_start: date, period_end: date) -> tuple[date, date]:
    """Record window for a monthly correction: [start + 1 month, end - 1 month].

    The event month never accrues and the final month is charged at the flat
    final-month rate, so neither is fetched.
    """
    return add_months(period_start, 1), add_months(period_end, -1)
