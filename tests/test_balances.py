"""
Tests for account balances, running balances and net worth.
"""

import pytest
from datetime import date
from decimal import Decimal

from src.calculations import (
    calculate_account_balance,
    calculate_cash_balance,
    calculate_net_worth,
    calculate_running_balance,
)
from src.models.financial import (
    Account,
    CashbookEntry,
    Transaction,
    TransactionEntry,
)


def journal(*entries, day=date(2024, 5, 1), txn_id="t1"):
    return Transaction(
        id=txn_id,
        date=day,
        description="Test",
        entries=[
            TransactionEntry(account_id=a, debit=Decimal(d), credit=Decimal(c))
            for a, d, c in entries
        ],
    )


def cashbook(entry_id, day, entry_type, amount, bank="HDFC"):
    return CashbookEntry(
        id=entry_id,
        date=day,
        bank_account=bank,
        type=entry_type,
        amount=Decimal(amount),
        description=f"Entry {entry_id}",
    )


class TestAccountBalance:
    """Tests for calculate_account_balance."""

    def test_asset_debit_increases_balance(self):
        """Test that a debit to an asset account adds to it."""
        account = Account(id="A", name="Bank", type="asset")
        transactions = [journal(("A", "100", "0"), ("X", "0", "100"))]
        assert calculate_account_balance(account, transactions) == Decimal("100")

    def test_liability_debit_decreases_balance(self):
        """Test that the same debit on a liability account subtracts."""
        account = Account(id="A", name="Card", type="liability")
        transactions = [journal(("A", "100", "0"), ("X", "0", "100"))]
        assert calculate_account_balance(account, transactions) == Decimal("-100")

    def test_expense_is_debit_normal(self):
        account = Account(id="E", name="Food", type="expense")
        transactions = [journal(("E", "40", "0"), ("A", "0", "40"))]
        assert calculate_account_balance(account, transactions) == Decimal("40")

    @pytest.mark.parametrize("account_type", ["income", "equity"])
    def test_credit_normal_types(self, account_type):
        """Test that income and equity grow with credits."""
        account = Account(id="I", name="Salary", type=account_type)
        transactions = [journal(("A", "500", "0"), ("I", "0", "500"))]
        assert calculate_account_balance(account, transactions) == Decimal("500")

    def test_sums_across_transactions(self):
        account = Account(id="A", name="Bank", type="asset")
        transactions = [
            journal(("A", "100", "0"), ("I", "0", "100"), txn_id="t1"),
            journal(("E", "30", "0"), ("A", "0", "30"), txn_id="t2"),
        ]
        assert calculate_account_balance(account, transactions) == Decimal("70")

    def test_unrelated_account_is_zero(self):
        account = Account(id="Z", name="Unused", type="asset")
        assert calculate_account_balance(account, [journal(("A", "1", "0"))]) == Decimal("0")

    def test_recalculation_is_idempotent(self):
        """Test that recomputing from the same journal gives the same answer."""
        account = Account(id="A", name="Bank", type="asset")
        transactions = [journal(("A", "12.34", "0"), ("I", "0", "12.34"))]
        first = calculate_account_balance(account, transactions)
        refreshed = account.model_copy(update={"balance": first})
        assert calculate_account_balance(refreshed, transactions) == first


class TestRunningBalance:
    """Tests for calculate_running_balance."""

    def test_running_balance_in_date_order(self):
        """Test that input order does not affect the running totals."""
        withdrawal = cashbook("b", date(2024, 1, 2), "withdrawal", "20")
        deposit = cashbook("a", date(2024, 1, 1), "deposit", "50")

        result = calculate_running_balance([withdrawal, deposit])

        assert [e.id for e in result] == ["a", "b"]
        assert [e.balance for e in result] == [Decimal("50"), Decimal("30")]

    def test_same_day_entries_keep_input_order(self):
        """Test the sort is stable for entries sharing a date."""
        day = date(2024, 1, 1)
        entries = [
            cashbook("first", day, "deposit", "10"),
            cashbook("second", day, "withdrawal", "3"),
            cashbook("third", day, "deposit", "1"),
        ]
        result = calculate_running_balance(entries)
        assert [e.id for e in result] == ["first", "second", "third"]
        assert [e.balance for e in result] == [Decimal("10"), Decimal("7"), Decimal("8")]

    def test_starting_balance(self):
        result = calculate_running_balance(
            [cashbook("a", date(2024, 1, 1), "withdrawal", "25")],
            starting_balance=Decimal("100"),
        )
        assert result[0].balance == Decimal("75")

    def test_transfer_subtracts(self):
        """Test that non-deposit entry types reduce the balance."""
        result = calculate_running_balance(
            [cashbook("a", date(2024, 1, 1), "transfer", "25")]
        )
        assert result[0].balance == Decimal("-25")

    def test_other_fields_preserved(self):
        entry = cashbook("a", date(2024, 1, 1), "deposit", "50")
        (result,) = calculate_running_balance([entry])
        assert result.model_dump(exclude={"balance"}) == entry.model_dump(exclude={"balance"})

    def test_input_not_modified(self):
        entry = cashbook("a", date(2024, 1, 1), "deposit", "50")
        calculate_running_balance([entry])
        assert entry.balance == Decimal("0")

    def test_empty(self):
        assert calculate_running_balance([]) == []


class TestNetWorth:
    """Tests for net worth and cash balance."""

    def test_net_worth_excludes_inactive(self):
        """Test that closed accounts are left out of net worth."""
        accounts = [
            Account(id="1001", name="Bank", type="asset", balance=Decimal("1000")),
            Account(id="2001", name="Card", type="liability", balance=Decimal("300")),
            Account(
                id="1002", name="Old Bank", type="asset",
                balance=Decimal("500"), is_active=False,
            ),
        ]
        result = calculate_net_worth(accounts)
        assert result.total_assets == Decimal("1000")
        assert result.total_liabilities == Decimal("300")
        assert result.net_worth == Decimal("700")

    def test_net_worth_ignores_income_and_expense(self):
        accounts = [
            Account(id="4001", name="Salary", type="income", balance=Decimal("9000")),
            Account(id="5001", name="Food", type="expense", balance=Decimal("400")),
        ]
        assert calculate_net_worth(accounts).net_worth == Decimal("0")

    def test_empty_chart(self):
        result = calculate_net_worth([])
        assert result.total_assets == Decimal("0")
        assert result.net_worth == Decimal("0")

    def test_cash_balance(self):
        """Test that only active asset accounts with a cash sub-type count."""
        accounts = [
            Account(id="1001", name="Wallet", type="asset", sub_type="Cash", balance=Decimal("150")),
            Account(id="1002", name="Savings", type="asset", sub_type="Bank", balance=Decimal("900")),
            Account(
                id="1003", name="Old Wallet", type="asset", sub_type="cash",
                balance=Decimal("70"), is_active=False,
            ),
        ]
        assert calculate_cash_balance(accounts) == Decimal("150")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
