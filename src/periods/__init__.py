"""Financial-year periods package."""

from src.periods.financial_year import (
    InvalidFinancialYearError,
    format_financial_year,
    get_available_financial_years,
    get_current_financial_year,
    get_current_month,
    get_date_range_for_period,
    get_financial_year_dates,
    get_financial_year_from_date,
    get_financial_year_info,
    get_months_in_financial_year,
    get_quarter,
    is_current_financial_year,
    is_date_in_financial_year,
    list_financial_years,
    parse_financial_year,
)
from src.periods.selection import FinancialYearSelection

__all__ = [
    "FinancialYearSelection",
    "InvalidFinancialYearError",
    "format_financial_year",
    "get_available_financial_years",
    "get_current_financial_year",
    "get_current_month",
    "get_date_range_for_period",
    "get_financial_year_dates",
    "get_financial_year_from_date",
    "get_financial_year_info",
    "get_months_in_financial_year",
    "get_quarter",
    "is_current_financial_year",
    "is_date_in_financial_year",
    "list_financial_years",
    "parse_financial_year",
]
