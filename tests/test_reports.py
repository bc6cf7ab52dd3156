"""
Tests for period reports and financial statements.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from src.calculations import (
    build_balance_sheet,
    build_financial_summary,
    build_income_statement,
    calculate_cash_flow,
    calculate_expenses_by_category,
    calculate_monthly_expenses,
    calculate_monthly_income,
)
from src.models.financial import (
    Account,
    CashbookEntry,
    Investment,
    Transaction,
    TransactionEntry,
)


ACCOUNTS = [
    Account(id="1001", name="Wallet", type="asset", sub_type="Cash", balance=Decimal("2000")),
    Account(id="1002", name="Savings", type="asset", sub_type="Bank", balance=Decimal("8000")),
    Account(id="2001", name="Credit Card", type="liability", balance=Decimal("1500")),
    Account(id="3001", name="Opening Equity", type="equity", balance=Decimal("5000")),
    Account(id="4001", name="Salary", type="income"),
    Account(id="5001", name="Groceries", type="expense", sub_type="Food"),
    Account(id="5002", name="Rent", type="expense", sub_type="Housing"),
]


def txn(txn_id, day, entries, category=None):
    return Transaction(
        id=txn_id,
        date=day,
        description=txn_id,
        category=category,
        entries=[
            TransactionEntry(account_id=a, debit=Decimal(d), credit=Decimal(c))
            for a, d, c in entries
        ],
    )


JOURNAL = [
    txn("salary-may", date(2024, 5, 1), [("1002", "50000", "0"), ("4001", "0", "50000")]),
    txn("rent-may", date(2024, 5, 3), [("5002", "15000", "0"), ("1002", "0", "15000")]),
    txn("food-may", date(2024, 5, 10), [("5001", "3000", "0"), ("1001", "0", "3000")]),
    txn("food-june", date(2024, 6, 10), [("5001", "2000", "0"), ("1001", "0", "2000")]),
    txn("salary-june", date(2024, 6, 1), [("1002", "52000", "0"), ("4001", "0", "52000")]),
]


class TestMonthlyTotals:
    """Tests for monthly income and expense totals."""

    def test_monthly_income(self):
        assert calculate_monthly_income(JOURNAL, ACCOUNTS, "2024-05") == Decimal("50000")

    def test_monthly_expenses(self):
        assert calculate_monthly_expenses(JOURNAL, ACCOUNTS, "2024-05") == Decimal("18000")

    def test_month_without_activity(self):
        assert calculate_monthly_income(JOURNAL, ACCOUNTS, "2024-07") == Decimal("0")

    def test_unknown_account_contributes_zero(self):
        """Test that entries pointing at missing accounts are ignored."""
        dangling = [txn("x", date(2024, 5, 2), [("9999", "0", "700"), ("1001", "700", "0")])]
        assert calculate_monthly_income(JOURNAL + dangling, ACCOUNTS, "2024-05") == Decimal("50000")


class TestExpensesByCategory:
    """Tests for the category rollup."""

    def test_same_category_merged_and_sorted(self):
        """Test that one category across dates becomes a single line."""
        result = calculate_expenses_by_category(JOURNAL, ACCOUNTS)
        assert [(r.category, r.amount) for r in result] == [
            ("Housing", Decimal("15000")),
            ("Food", Decimal("5000")),
        ]

    def test_transaction_category_takes_precedence(self):
        journal = [
            txn("a", date(2024, 5, 1), [("5001", "100", "0"), ("1001", "0", "100")], category="Dining"),
        ]
        result = calculate_expenses_by_category(journal, ACCOUNTS)
        assert result[0].category == "Dining"

    def test_uncategorized_fallback(self):
        accounts = [Account(id="5009", name="Misc", type="expense")]
        journal = [txn("a", date(2024, 5, 1), [("5009", "10", "0"), ("1001", "0", "10")])]
        assert calculate_expenses_by_category(journal, accounts)[0].category == "Uncategorized"

    def test_date_range_is_inclusive(self):
        result = calculate_expenses_by_category(
            JOURNAL, ACCOUNTS, start_date=date(2024, 6, 1), end_date=date(2024, 6, 10)
        )
        assert [(r.category, r.amount) for r in result] == [("Food", Decimal("2000"))]


class TestCashFlow:
    """Tests for calculate_cash_flow."""

    def test_inflow_and_outflow(self):
        entries = [
            CashbookEntry(id="1", date=date(2024, 5, 1), type="deposit", amount=Decimal("500")),
            CashbookEntry(id="2", date=date(2024, 5, 2), type="withdrawal", amount=Decimal("120")),
            CashbookEntry(id="3", date=date(2024, 7, 1), type="deposit", amount=Decimal("999")),
        ]
        result = calculate_cash_flow(entries, date(2024, 5, 1), date(2024, 5, 31))
        assert result.total_inflow == Decimal("500")
        assert result.total_outflow == Decimal("120")
        assert result.net_cash_flow == Decimal("380")


class TestStatements:
    """Tests for the balance sheet, income statement and summary."""

    def test_balance_sheet_sections(self):
        sheet = build_balance_sheet(ACCOUNTS, "2024-25", date(2024, 6, 30))
        assert sheet.total_assets == Decimal("10000")
        assert sheet.total_liabilities == Decimal("1500")
        assert sheet.total_equity == Decimal("5000")
        assert [line.account_id for line in sheet.assets] == ["1002", "1001"]
        assert sheet.assets[0].percentage == Decimal("80")

    def test_balance_sheet_empty_section(self):
        sheet = build_balance_sheet(ACCOUNTS[:2], "2024-25", date(2024, 6, 30))
        assert sheet.liabilities == []
        assert sheet.total_liabilities == Decimal("0")

    def test_income_statement(self):
        statement = build_income_statement(
            JOURNAL, ACCOUNTS, date(2024, 5, 1), date(2024, 5, 31), "2024-25"
        )
        assert statement.total_income == Decimal("50000")
        assert statement.total_expenses == Decimal("18000")
        assert statement.net_income == Decimal("32000")
        assert [line.account_id for line in statement.expenses] == ["5002", "5001"]

    def test_financial_summary(self):
        investments = [
            Investment(
                id="i1", symbol="INFY", quantity=Decimal("10"),
                average_price=Decimal("100"), current_price=Decimal("120"),
            ),
        ]
        stamp = datetime(2024, 6, 15, tzinfo=timezone.utc)
        summary = build_financial_summary(ACCOUNTS, JOURNAL, investments, "2024-06", now=stamp)
        assert summary.total_assets == Decimal("10000")
        assert summary.net_worth == Decimal("8500")
        assert summary.monthly_income == Decimal("52000")
        assert summary.monthly_expenses == Decimal("2000")
        assert summary.investment_value == Decimal("1200")
        assert summary.cash_balance == Decimal("2000")
        assert summary.last_updated == stamp


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
