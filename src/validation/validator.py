"""
Ledger Validation

DESIGN DECISION: Validation is split in two layers:

DOUBLE-ENTRY CHECK:
- Debits and credits across a transaction's entries must net to zero
- A fixed absolute tolerance absorbs rounding from imported values

TRANSACTION CHECK:
- Required fields (description, date, at least one entry)
- The double-entry check above
- Per-entry shape (an account, exactly one of debit/credit)

IMPORTANT: Validation NEVER raises for well-typed input and NEVER silently
fixes anything. Every problem is collected in one pass and returned so the
UI can show all of them at once.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union

from src.models.financial import (
    ZERO,
    DoubleEntryValidation,
    EntryDraft,
    Transaction,
    TransactionDraft,
    TransactionEntry,
    ValidationResult,
)


# Absolute, so it is in currency units. Revisit if multi-currency lands.
BALANCE_TOLERANCE = Decimal("0.01")

EntryLike = Union[TransactionEntry, EntryDraft]


def _amount(value: Optional[Union[Decimal, int, float, str]]) -> Decimal:
    """Treat absent amounts as zero."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def validate_double_entry(entries: Iterable[EntryLike]) -> DoubleEntryValidation:
    """
    Check that total debits equal total credits.

    Args:
        entries: Transaction entries (full or draft)

    Returns:
        DoubleEntryValidation with both totals and their absolute difference.
        Valid when the difference is strictly below BALANCE_TOLERANCE.
    """
    total_debits = ZERO
    total_credits = ZERO

    for entry in entries:
        total_debits += _amount(entry.debit)
        total_credits += _amount(entry.credit)

    difference = abs(total_debits - total_credits)

    return DoubleEntryValidation(
        is_valid=difference < BALANCE_TOLERANCE,
        total_debits=total_debits,
        total_credits=total_credits,
        difference=difference,
    )


def validate_transaction(
    transaction: Union[Transaction, TransactionDraft],
) -> ValidationResult:
    """
    Run every structural and balance check on a transaction.

    Returns:
        ValidationResult whose `is_valid` is True only when no error was found
    """
    errors: list[str] = []

    if not (transaction.description or "").strip():
        errors.append("Description is required")

    if not transaction.date:
        errors.append("Date is required")

    entries = transaction.entries or []
    if not entries:
        errors.append("At least one entry is required")

    if entries:
        balance = validate_double_entry(entries)
        if not balance.is_valid:
            errors.append(
                f"Transaction is not balanced. Difference: {balance.difference:.2f}"
            )

        for entry in entries:
            if not entry.account_id:
                errors.append("All entries must have an account")

            debit = _amount(entry.debit)
            credit = _amount(entry.credit)

            if not debit and not credit:
                errors.append("Each entry must have either a debit or credit amount")

            if debit and credit:
                errors.append("Each entry cannot have both debit and credit amounts")

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_password(password: Optional[str]) -> ValidationResult:
    """Check a submitted password is present before comparing it."""
    errors = []

    if password is None:
        errors.append("Password is required")
    elif len(password) < 1:
        errors.append("Password cannot be empty")

    return ValidationResult(is_valid=not errors, errors=errors)


def summarize_validation(result: ValidationResult) -> str:
    """
    Generate a user-friendly summary of validation results.

    This is what we show above the transaction form.
    """
    if result.is_valid:
        return "✅ Transaction is balanced and complete."

    lines = ["❌ Please fix the following before saving:"]
    for error in result.errors:
        lines.append(f"   • {error}")

    return "\n".join(lines)
