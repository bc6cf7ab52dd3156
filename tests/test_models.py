"""
Tests for Personal Ledger

Test strategy:
1. Unit tests for individual components (models, validators, calculations)
2. Integration tests for flows (with in-memory storage)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from src.models.financial import (
    Account,
    AccountType,
    CashbookEntry,
    CashbookEntryType,
    Category,
    CategoryType,
    Investment,
    InvestmentTransaction,
    InvestmentTransactionType,
    Transaction,
    TransactionDraft,
    TransactionEntry,
    ValidationResult,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerModels:
    """Tests for ledger record models."""

    def test_account_creation(self):
        """Test Account model creation."""
        account = Account(id="1001", name="Cash in Hand", type=AccountType.ASSET)
        assert account.id == "1001"
        assert account.balance == Decimal("0")
        assert account.is_active is True

    def test_account_stores_enum_type_as_plain_string(self):
        """Test that enum members are stored as their raw value."""
        account = Account(id="1001", name="Cash", type=AccountType.ASSET)
        assert type(account.type) is str
        assert account.type == "asset"
        assert account.type == AccountType.ASSET

    def test_account_tolerates_unknown_type(self):
        """Test that an unknown type label is kept rather than rejected."""
        account = Account(id="9001", name="Mystery", type="suspense")
        assert account.type == "suspense"

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from the account name."""
        account = Account(id="1001", name="  Cash  ", type="asset")
        assert account.name == "Cash"

    def test_account_requires_name(self):
        """Test that an empty account name is rejected."""
        with pytest.raises(ValidationError):
            Account(id="1001", name="", type="asset")

    def test_account_is_frozen(self):
        """Test that records cannot be mutated in place."""
        account = Account(id="1001", name="Cash", type="asset")
        with pytest.raises(ValidationError):
            account.balance = Decimal("10")

    def test_transaction_entry_camel_case_aliases(self):
        """Test that entries accept and emit camelCase keys."""
        entry = TransactionEntry.model_validate(
            {"accountId": "1001", "accountName": "Cash", "debit": 100, "credit": 0}
        )
        assert entry.account_id == "1001"
        assert entry.debit == Decimal("100")
        dumped = entry.model_dump(by_alias=True)
        assert set(dumped) == {"accountId", "accountName", "debit", "credit"}

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        transaction = Transaction(
            id=uuid4().hex,
            date=date(2024, 5, 1),
            description="Groceries",
            entries=[
                TransactionEntry(account_id="5001", debit=Decimal("250")),
                TransactionEntry(account_id="1001", credit=Decimal("250")),
            ],
        )
        assert len(transaction.entries) == 2
        assert transaction.reference is None
        assert transaction.is_balanced is False

    def test_transaction_draft_allows_missing_fields(self):
        """Test that a draft can be built with nothing filled in."""
        draft = TransactionDraft()
        assert draft.date is None
        assert draft.entries is None

    def test_cashbook_entry_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            CashbookEntry(
                id="c1",
                date=date(2024, 5, 1),
                type=CashbookEntryType.DEPOSIT,
                amount=Decimal("-10"),
            )

    def test_investment_defaults(self):
        """Test Investment default type and metrics."""
        investment = Investment(id="i1", symbol="INFY")
        assert investment.type == "other"
        assert investment.gain_loss == Decimal("0")

    def test_investment_transaction_requires_positive_quantity(self):
        """Test that a trade must move at least some quantity."""
        with pytest.raises(ValidationError):
            InvestmentTransaction(
                id="t1",
                investment_id="i1",
                date=date(2024, 5, 1),
                type=InvestmentTransactionType.BUY,
                quantity=Decimal("0"),
                price=Decimal("10"),
            )

    def test_category_type_is_validated(self):
        """Test that categories only take income or expense."""
        category = Category(id="c1", name="Salary", type="income")
        assert category.type == CategoryType.INCOME
        with pytest.raises(ValidationError):
            Category(id="c2", name="Odd", type="asset")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            description="Account created",
        )
        assert event.event_type == AuditEventType.ACCOUNT_CREATED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            description="Transaction recorded",
            details={"amount": "1000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_recorded"
        assert log_dict["details"]["amount"] == "1000"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            description="User logged in",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "login_succeeded"  # event_type
        assert row[10] == "True"  # is_user_action

    def test_sheets_row_serializes_decimal_details(self):
        """Test that non-JSON detail values are stringified."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_BALANCE_REFRESHED,
            description="Balance refreshed",
            details={"new_balance": Decimal("12.50")},
        )
        assert '"12.50"' in event.to_sheets_row()[8]

    def test_audit_event_builder_account_created(self):
        """Test AuditEventBuilder.account_created."""
        correlation_id = uuid4()

        event = AuditEventBuilder.account_created(
            account_id="1001",
            name="Cash",
            account_type="asset",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.ACCOUNT_CREATED
        assert event.entity_type == "account"
        assert event.entity_id == "1001"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_transaction_rejected(self):
        """Test AuditEventBuilder.transaction_rejected."""
        event = AuditEventBuilder.transaction_rejected(
            errors=["Description is required", "Date is required"],
            correlation_id=uuid4(),
        )

        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id is None
        assert event.details["errors"] == ["Description is required", "Date is required"]
        assert "2 errors" in event.description

    def test_audit_event_builder_login_failed(self):
        """Test AuditEventBuilder.login_failed."""
        event = AuditEventBuilder.login_failed("invalid_password")
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert event.details == {"reason": "invalid_password"}


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(is_valid=False, errors=["Date is required"])
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_clean(self):
        """Test a result without errors."""
        result = ValidationResult(is_valid=True)
        assert result.has_errors is False
        assert result.error_count == 0


class TestLedgerEnums:
    """Tests for ledger enums."""

    def test_account_type_values(self):
        """Test account type string values."""
        expected = ["asset", "liability", "income", "expense", "equity"]
        assert [t.value for t in AccountType] == expected

    def test_enum_compares_equal_to_raw_value(self):
        """Test that str enums match the labels read back from sheets."""
        assert AccountType.EXPENSE == "expense"
        assert CashbookEntryType("withdrawal") is CashbookEntryType.WITHDRAWAL


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
