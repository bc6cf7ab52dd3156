"""
Ledger & portfolio calculations.

Pure, synchronous functions over snapshots of accounts, transactions,
cashbook entries and investments. Nothing here performs I/O.
"""

from src.calculations.accounts import generate_account_code
from src.calculations.balances import (
    calculate_account_balance,
    calculate_cash_balance,
    calculate_net_worth,
    calculate_running_balance,
)
from src.calculations.portfolio import (
    InsufficientQuantityError,
    apply_investment_transaction,
    calculate_investment_metrics,
    calculate_portfolio_value,
    group_portfolio_by_type,
    refresh_investment,
)
from src.calculations.reports import (
    build_balance_sheet,
    build_financial_summary,
    build_income_statement,
    calculate_cash_flow,
    calculate_expenses_by_category,
    calculate_monthly_expenses,
    calculate_monthly_income,
)

__all__ = [
    "InsufficientQuantityError",
    "apply_investment_transaction",
    "build_balance_sheet",
    "build_financial_summary",
    "build_income_statement",
    "calculate_account_balance",
    "calculate_cash_balance",
    "calculate_cash_flow",
    "calculate_expenses_by_category",
    "calculate_investment_metrics",
    "calculate_monthly_expenses",
    "calculate_monthly_income",
    "calculate_net_worth",
    "calculate_portfolio_value",
    "calculate_running_balance",
    "generate_account_code",
    "group_portfolio_by_type",
    "refresh_investment",
]
