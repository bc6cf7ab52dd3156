"""
Tests for double-entry and transaction validation.
"""

import pytest
from datetime import date
from decimal import Decimal

from src.models.financial import EntryDraft, TransactionDraft, TransactionEntry
from src.validation import (
    BALANCE_TOLERANCE,
    summarize_validation,
    validate_double_entry,
    validate_password,
    validate_transaction,
)


def entry(account_id="1001", debit="0", credit="0"):
    return TransactionEntry(
        account_id=account_id,
        debit=Decimal(debit),
        credit=Decimal(credit),
    )


def balanced_draft(**overrides):
    fields = {
        "date": date(2024, 6, 1),
        "description": "Electricity bill",
        "entries": [
            EntryDraft(account_id="5001", debit=Decimal("1500")),
            EntryDraft(account_id="1001", credit=Decimal("1500")),
        ],
    }
    fields.update(overrides)
    return TransactionDraft(**fields)


class TestValidateDoubleEntry:
    """Tests for validate_double_entry."""

    def test_exactly_balanced(self):
        """Test equal debits and credits give zero difference."""
        result = validate_double_entry([
            entry("5001", debit="250.75"),
            entry("1001", credit="200.75"),
            entry("1002", credit="50"),
        ])
        assert result.is_valid is True
        assert result.difference == Decimal("0")
        assert result.total_debits == Decimal("250.75")
        assert result.total_credits == Decimal("250.75")

    def test_difference_below_tolerance_is_valid(self):
        """Test a 0.009 difference is absorbed by the tolerance."""
        result = validate_double_entry([
            entry("5001", debit="100.009"),
            entry("1001", credit="100"),
        ])
        assert result.is_valid is True
        assert result.difference == Decimal("0.009")

    def test_difference_above_tolerance_is_invalid(self):
        """Test a 0.011 difference is rejected."""
        result = validate_double_entry([
            entry("5001", debit="100.011"),
            entry("1001", credit="100"),
        ])
        assert result.is_valid is False
        assert result.difference == Decimal("0.011")

    def test_tolerance_boundary_is_exclusive(self):
        """Test a difference equal to the tolerance is not balanced."""
        result = validate_double_entry([
            entry("5001", debit="100.01"),
            entry("1001", credit="100"),
        ])
        assert result.difference == BALANCE_TOLERANCE
        assert result.is_valid is False

    def test_empty_entries_balance(self):
        """Test that no entries trivially balance."""
        result = validate_double_entry([])
        assert result.is_valid is True
        assert result.total_debits == Decimal("0")

    def test_missing_amounts_count_as_zero(self):
        """Test draft entries with absent amounts."""
        result = validate_double_entry([
            EntryDraft(account_id="5001", debit=Decimal("10")),
            EntryDraft(account_id="1001", credit=Decimal("10")),
            EntryDraft(account_id="1002"),
        ])
        assert result.is_valid is True

    def test_entry_order_is_irrelevant(self):
        """Test that reordering entries does not change the result."""
        entries = [entry("5001", debit="30"), entry("1001", credit="10"), entry("1002", credit="20")]
        assert validate_double_entry(entries) == validate_double_entry(list(reversed(entries)))


class TestValidateTransaction:
    """Tests for validate_transaction."""

    def test_valid_transaction(self):
        """Test a complete, balanced transaction passes."""
        result = validate_transaction(balanced_draft())
        assert result.is_valid is True
        assert result.errors == []

    def test_missing_description(self):
        """Test that a blank description is reported."""
        result = validate_transaction(balanced_draft(description="   "))
        assert result.is_valid is False
        assert "Description is required" in result.errors

    def test_missing_date(self):
        """Test that a missing date is reported."""
        result = validate_transaction(balanced_draft(date=None))
        assert "Date is required" in result.errors

    def test_no_entries(self):
        """Test that a transaction needs entries."""
        result = validate_transaction(balanced_draft(entries=[]))
        assert result.errors == ["At least one entry is required"]

    def test_unbalanced_reports_difference(self):
        """Test the unbalanced message carries a two-decimal difference."""
        result = validate_transaction(balanced_draft(entries=[
            EntryDraft(account_id="5001", debit=Decimal("100")),
            EntryDraft(account_id="1001", credit=Decimal("90.5")),
        ]))
        assert "Transaction is not balanced. Difference: 9.50" in result.errors

    def test_entry_without_account(self):
        """Test that every entry must name an account."""
        result = validate_transaction(balanced_draft(entries=[
            EntryDraft(account_id="", debit=Decimal("100")),
            EntryDraft(account_id="1001", credit=Decimal("100")),
        ]))
        assert "All entries must have an account" in result.errors

    def test_entry_without_amount(self):
        """Test that an entry needs a debit or a credit."""
        result = validate_transaction(balanced_draft(entries=[
            EntryDraft(account_id="5001", debit=Decimal("100")),
            EntryDraft(account_id="1001", credit=Decimal("100")),
            EntryDraft(account_id="1002"),
        ]))
        assert "Each entry must have either a debit or credit amount" in result.errors

    def test_entry_with_both_sides(self):
        """Test that an entry cannot carry both a debit and a credit."""
        result = validate_transaction(balanced_draft(entries=[
            EntryDraft(account_id="5001", debit=Decimal("100"), credit=Decimal("100")),
        ]))
        assert "Each entry cannot have both debit and credit amounts" in result.errors

    def test_collects_all_errors_at_once(self):
        """Test that validation does not stop at the first problem."""
        result = validate_transaction(TransactionDraft(
            entries=[EntryDraft(account_id="5001", debit=Decimal("5"))],
        ))
        assert "Description is required" in result.errors
        assert "Date is required" in result.errors
        assert any(e.startswith("Transaction is not balanced") for e in result.errors)
        assert result.error_count >= 3

    def test_draft_from_camel_case_payload(self):
        """Test a draft parsed from a form/API payload."""
        draft = TransactionDraft.model_validate({
            "date": "2024-06-01",
            "description": "Salary",
            "entries": [
                {"accountId": "1002", "debit": "50000"},
                {"accountId": "4001", "credit": "50000"},
            ],
        })
        assert validate_transaction(draft).is_valid is True


class TestPasswordValidation:
    """Tests for validate_password."""

    def test_missing_password(self):
        result = validate_password(None)
        assert result.errors == ["Password is required"]

    def test_empty_password(self):
        result = validate_password("")
        assert result.errors == ["Password cannot be empty"]

    def test_present_password(self):
        assert validate_password("hunter2").is_valid is True


class TestSummarizeValidation:
    """Tests for the user-facing summary."""

    def test_summary_for_valid(self):
        result = validate_transaction(balanced_draft())
        assert summarize_validation(result).startswith("✅")

    def test_summary_lists_every_error(self):
        result = validate_transaction(TransactionDraft())
        summary = summarize_validation(result)
        assert summary.startswith("❌")
        for error in result.errors:
            assert error in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
