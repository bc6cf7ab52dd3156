"""
Financial Year Utilities

The reporting year runs from 1 April to 31 March and is labelled
"<startYear>-<2-digit endYear>", e.g. "2024-25".

Every function that depends on "now" takes an optional `today` so callers
(and tests) can pin the clock.
"""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from src.models.financial import FinancialYearInfo


FINANCIAL_YEAR_START_MONTH = 4
YEARS_BACK = 5
YEARS_FORWARD = 2

_LABEL_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


class InvalidFinancialYearError(ValueError):
    """A financial-year label that is not of the form 2024-25."""
    pass


def format_financial_year(start_year: int) -> str:
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def parse_financial_year(financial_year: str) -> int:
    """
    Return the calendar year in which a financial year starts.

    Raises:
        InvalidFinancialYearError: If the label is malformed or its two
            halves are not consecutive years
    """
    match = _LABEL_PATTERN.match(financial_year or "")
    if not match:
        raise InvalidFinancialYearError(
            f"Financial year must look like 2024-25, got {financial_year!r}"
        )

    start_year = int(match.group(1))
    if (start_year + 1) % 100 != int(match.group(2)):
        raise InvalidFinancialYearError(
            f"Financial year {financial_year!r} does not span consecutive years"
        )
    return start_year


def get_financial_year_from_date(day: date) -> str:
    if day.month >= FINANCIAL_YEAR_START_MONTH:
        return format_financial_year(day.year)
    return format_financial_year(day.year - 1)


def get_current_financial_year(today: Optional[date] = None) -> str:
    return get_financial_year_from_date(today or date.today())


def get_financial_year_dates(financial_year: str) -> tuple[date, date]:
    """First and last day (inclusive) of a financial year."""
    start_year = parse_financial_year(financial_year)
    return date(start_year, 4, 1), date(start_year + 1, 3, 31)


def is_date_in_financial_year(day: date, financial_year: str) -> bool:
    start, end = get_financial_year_dates(financial_year)
    return start <= day <= end


def is_current_financial_year(
    financial_year: str,
    today: Optional[date] = None,
) -> bool:
    return financial_year == get_current_financial_year(today)


def get_available_financial_years(today: Optional[date] = None) -> list[str]:
    """The last five years, the current one and the next two, newest first."""
    current = parse_financial_year(get_current_financial_year(today))
    years = [
        format_financial_year(current + offset)
        for offset in range(-YEARS_BACK, YEARS_FORWARD + 1)
    ]
    return sorted(years, reverse=True)


def get_financial_year_info(
    financial_year: str,
    today: Optional[date] = None,
) -> FinancialYearInfo:
    start, end = get_financial_year_dates(financial_year)
    return FinancialYearInfo(
        year=financial_year,
        start_date=start,
        end_date=end,
        is_current=is_current_financial_year(financial_year, today),
    )


def list_financial_years(today: Optional[date] = None) -> list[FinancialYearInfo]:
    return [
        get_financial_year_info(year, today)
        for year in get_available_financial_years(today)
    ]


def get_months_in_financial_year(financial_year: str) -> list[str]:
    """The twelve `YYYY-MM` months of a financial year, April first."""
    start, _ = get_financial_year_dates(financial_year)
    return [
        (start + relativedelta(months=offset)).strftime("%Y-%m")
        for offset in range(12)
    ]


def get_current_month(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%Y-%m")


def get_quarter(day: date) -> int:
    """Financial quarter: Q1 is April-June, Q4 is January-March."""
    return (day.month - FINANCIAL_YEAR_START_MONTH) % 12 // 3 + 1


def get_date_range_for_period(
    period: str,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """
    Start and end of a reporting window ending today.

    Args:
        period: "week", "month", "quarter" or "year" (financial year)
    """
    today = today or date.today()

    if period == "week":
        start = today - timedelta(days=7)
    elif period == "quarter":
        months_into_quarter = (today.month - FINANCIAL_YEAR_START_MONTH) % 3
        start = today.replace(day=1) - relativedelta(months=months_into_quarter)
    elif period == "year":
        start, _ = get_financial_year_dates(get_financial_year_from_date(today))
    else:
        start = today.replace(day=1)

    return start, today
