"""
Period Reports

Monthly income/expense totals, category rollups, cash flow and the
statements built from them (balance sheet, income statement, dashboard
summary).

DESIGN DECISION: Entries that reference an account id we don't know about
contribute zero instead of failing the report. A dangling reference in one
row of the sheet should not blank the whole dashboard.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from src.calculations.balances import (
    calculate_account_balance,
    calculate_cash_balance,
    calculate_net_worth,
)
from src.calculations.portfolio import calculate_portfolio_value
from src.models.financial import (
    ZERO,
    Account,
    AccountType,
    BalanceSheet,
    CashbookEntry,
    CashbookEntryType,
    CashFlow,
    CategoryAmount,
    FinancialSummary,
    IncomeStatement,
    Investment,
    StatementLine,
    Transaction,
    utc_now,
)


UNCATEGORIZED = "Uncategorized"


def _accounts_of_type(
    accounts: Iterable[Account],
    account_type: AccountType,
) -> dict[str, Account]:
    return {a.id: a for a in accounts if a.type == account_type}


def _in_range(
    day: date,
    start_date: Optional[date],
    end_date: Optional[date],
) -> bool:
    """Inclusive on both ends; a missing bound is open."""
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


def _month_of(day: date) -> str:
    return day.isoformat()[:7]


def calculate_monthly_income(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    month: str,
) -> Decimal:
    """Credits to income accounts in a `YYYY-MM` month."""
    income_accounts = _accounts_of_type(accounts, AccountType.INCOME)
    total = ZERO

    for transaction in transactions:
        if _month_of(transaction.date) != month:
            continue
        for entry in transaction.entries:
            if entry.account_id in income_accounts:
                total += entry.credit

    return total


def calculate_monthly_expenses(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    month: str,
) -> Decimal:
    """Debits to expense accounts in a `YYYY-MM` month."""
    expense_accounts = _accounts_of_type(accounts, AccountType.EXPENSE)
    total = ZERO

    for transaction in transactions:
        if _month_of(transaction.date) != month:
            continue
        for entry in transaction.entries:
            if entry.account_id in expense_accounts:
                total += entry.debit

    return total


def calculate_expenses_by_category(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[CategoryAmount]:
    """
    Expense debits grouped by category, largest first.

    The category is the transaction's own, else the expense account's
    sub-type, else "Uncategorized".
    """
    expense_accounts = _accounts_of_type(accounts, AccountType.EXPENSE)
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for transaction in transactions:
        if not _in_range(transaction.date, start_date, end_date):
            continue
        for entry in transaction.entries:
            account = expense_accounts.get(entry.account_id)
            if account is None or not entry.debit:
                continue
            category = transaction.category or account.sub_type or UNCATEGORIZED
            totals[category] += entry.debit

    rollup = [
        CategoryAmount(category=category, amount=amount)
        for category, amount in totals.items()
    ]
    rollup.sort(key=lambda item: item.amount, reverse=True)
    return rollup


def calculate_cash_flow(
    entries: Iterable[CashbookEntry],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> CashFlow:
    """Deposits in, withdrawals out, over an optional inclusive date range."""
    total_inflow = ZERO
    total_outflow = ZERO

    for entry in entries:
        if not _in_range(entry.date, start_date, end_date):
            continue
        if entry.type == CashbookEntryType.DEPOSIT:
            total_inflow += entry.amount
        elif entry.type == CashbookEntryType.WITHDRAWAL:
            total_outflow += entry.amount

    return CashFlow(
        total_inflow=total_inflow,
        total_outflow=total_outflow,
        net_cash_flow=total_inflow - total_outflow,
    )


# =============================================================================
# STATEMENTS
# =============================================================================

def _section(
    accounts: Iterable[tuple[Account, Decimal]],
) -> tuple[list[StatementLine], Decimal]:
    """Build statement lines with each line's share of the section total."""
    rows = list(accounts)
    total = sum((amount for _, amount in rows), ZERO)

    lines = [
        StatementLine(
            account_id=account.id,
            account_name=account.name,
            account_type=str(account.type),
            amount=amount,
            percentage=(amount / total * 100) if total else None,
        )
        for account, amount in rows
    ]
    lines.sort(key=lambda line: line.amount, reverse=True)
    return lines, total


def build_balance_sheet(
    accounts: Sequence[Account],
    financial_year: str,
    as_of: date,
) -> BalanceSheet:
    """
    Balance sheet from the cached balances of active accounts.

    Callers refresh balances first if the cache may be stale.
    """
    def active(account_type: AccountType):
        return (
            (a, a.balance)
            for a in accounts
            if a.type == account_type and a.is_active
        )

    assets, total_assets = _section(active(AccountType.ASSET))
    liabilities, total_liabilities = _section(active(AccountType.LIABILITY))
    equity, total_equity = _section(active(AccountType.EQUITY))

    return BalanceSheet(
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        as_of_date=as_of,
        financial_year=financial_year,
    )


def build_income_statement(
    transactions: Sequence[Transaction],
    accounts: Sequence[Account],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    financial_year: str = "",
) -> IncomeStatement:
    """Income and expense activity over a period, per account."""
    in_period = [
        t for t in transactions if _in_range(t.date, start_date, end_date)
    ]

    def activity(account_type: AccountType):
        for account in accounts:
            if account.type != account_type:
                continue
            amount = calculate_account_balance(account, in_period)
            if amount:
                yield account, amount

    income, total_income = _section(activity(AccountType.INCOME))
    expenses, total_expenses = _section(activity(AccountType.EXPENSE))

    return IncomeStatement(
        income=income,
        expenses=expenses,
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=total_income - total_expenses,
        period_from=start_date,
        period_to=end_date,
        financial_year=financial_year,
    )


def build_financial_summary(
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    investments: Sequence[Investment],
    month: str,
    now: Optional[datetime] = None,
) -> FinancialSummary:
    """Headline numbers for the dashboard."""
    net_worth = calculate_net_worth(accounts)
    portfolio = calculate_portfolio_value(investments)

    return FinancialSummary(
        total_assets=net_worth.total_assets,
        total_liabilities=net_worth.total_liabilities,
        net_worth=net_worth.net_worth,
        monthly_income=calculate_monthly_income(transactions, accounts, month),
        monthly_expenses=calculate_monthly_expenses(transactions, accounts, month),
        investment_value=portfolio.current_value,
        cash_balance=calculate_cash_balance(accounts),
        last_updated=now or utc_now(),
    )
