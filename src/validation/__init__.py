"""Ledger validation package."""

from src.validation.validator import (
    BALANCE_TOLERANCE,
    summarize_validation,
    validate_double_entry,
    validate_password,
    validate_transaction,
)

__all__ = [
    "BALANCE_TOLERANCE",
    "summarize_validation",
    "validate_double_entry",
    "validate_password",
    "validate_transaction",
]
