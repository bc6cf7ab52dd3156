"""
Spreadsheet Row Codecs

Each sheet has a fixed header row. Rows are encoded to and decoded from
those headers by name, so a reordered or widened sheet still reads.

DESIGN DECISION: Decoding never raises. A row that cannot be turned into a
valid record comes back as None and the caller skips it - one bad hand
edit in the spreadsheet must not take down every page.
"""

import json
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, TypeVar

import structlog
from pydantic import ValidationError

from src.models.audit import AuditEvent
from src.models.financial import (
    ZERO,
    Account,
    CashbookEntry,
    Category,
    FinancialSummary,
    Investment,
    InvestmentTransaction,
    Transaction,
    TransactionEntry,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")


ACCOUNT_COLUMNS = [
    "ID", "Name", "Type", "SubType", "Balance", "IsActive", "CreatedAt",
    "FinancialYear",
]

TRANSACTION_COLUMNS = [
    "ID", "Date", "Description", "Reference", "TotalAmount", "IsBalanced",
    "Category", "FinancialYear", "CreatedAt", "UpdatedAt", "Entries",
]

CASHBOOK_COLUMNS = [
    "ID", "Date", "Description", "BankAccount", "Type", "Amount", "Balance",
    "Category", "Reference", "Reconciled", "FinancialYear", "CreatedAt",
]

INVESTMENT_COLUMNS = [
    "ID", "Symbol", "Name", "Type", "Quantity", "AveragePrice",
    "CurrentPrice", "TotalInvestment", "CurrentValue", "GainLoss",
    "GainLossPercentage", "LastUpdated", "FinancialYear",
]

INVESTMENT_TRANSACTION_COLUMNS = [
    "ID", "InvestmentID", "Date", "Type", "Quantity", "Price", "TotalAmount",
    "Fees", "Notes", "FinancialYear", "CreatedAt",
]

CATEGORY_COLUMNS = ["ID", "Name", "Type", "IsActive", "CreatedAt"]

DASHBOARD_COLUMNS = ["Metric", "Value", "LastUpdated"]

CONFIG_COLUMNS = ["Key", "Value", "Description"]

AUDIT_COLUMNS = [
    "event_id", "timestamp", "event_type", "severity", "entity_type",
    "entity_id", "correlation_id", "description", "details_json",
    "error_message", "is_user_action",
]

# Currency symbols and thousands separators a human may type into a cell
_AMOUNT_NOISE = re.compile(r"[₹$,\s]")


# =============================================================================
# CELL HELPERS
# =============================================================================

def _cell(row: dict[str, str], column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value).strip()


def _optional(value: str) -> Optional[str]:
    return value or None


def _amount(value: str) -> Decimal:
    """Empty cells read as zero; anything else must be a number."""
    cleaned = _AMOUNT_NOISE.sub("", value)
    if not cleaned:
        return ZERO
    return Decimal(cleaned)


def _flag(value: str) -> bool:
    return value.upper() == "TRUE"


def _write_flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _write_amount(value: Decimal) -> str:
    return str(value)


def _write_stamp(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def named(columns: list[str], row: list) -> dict[str, str]:
    """Pair a raw row with its header; short rows are padded with blanks."""
    padded = list(row) + [""] * (len(columns) - len(row))
    return dict(zip(columns, padded))


def _decode(
    kind: str,
    columns: list[str],
    row: list,
    build: Callable[[dict[str, str]], T],
) -> Optional[T]:
    cells = named(columns, row)
    if not _cell(cells, columns[0]):
        return None
    try:
        return build(cells)
    except (ValidationError, ValueError, InvalidOperation, TypeError) as e:
        logger.warning(
            "row_skipped",
            kind=kind,
            row_id=_cell(cells, columns[0]),
            error=str(e),
        )
        return None


# =============================================================================
# ACCOUNTS
# =============================================================================

def encode_account(account: Account) -> list[str]:
    return [
        account.id,
        account.name,
        account.type,
        account.sub_type,
        _write_amount(account.balance),
        _write_flag(account.is_active),
        _write_stamp(account.created_at),
        account.financial_year,
    ]


def decode_account(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[Account]:
    def build(c: dict[str, str]) -> Account:
        return Account(
            id=_cell(c, "ID"),
            name=_cell(c, "Name"),
            type=_cell(c, "Type"),
            sub_type=_cell(c, "SubType"),
            balance=_amount(_cell(c, "Balance")),
            is_active=_flag(_cell(c, "IsActive")),
            created_at=_optional(_cell(c, "CreatedAt")),
            financial_year=_cell(c, "FinancialYear"),
        )

    return _decode("account", header or ACCOUNT_COLUMNS, row, build)


# =============================================================================
# TRANSACTIONS
# =============================================================================

def encode_entries(entries: list[TransactionEntry]) -> str:
    """Entries are a JSON array with camelCase keys and amounts as decimal strings."""
    return json.dumps(
        [entry.model_dump(by_alias=True) for entry in entries],
        default=str,
    )


def decode_entries(value: str) -> list[TransactionEntry]:
    if not value:
        return []
    data = json.loads(value)
    if not isinstance(data, list):
        raise ValueError("Entries column is not a JSON array")
    return [TransactionEntry.model_validate(item) for item in data]


def encode_transaction(transaction: Transaction) -> list[str]:
    return [
        transaction.id,
        transaction.date.isoformat(),
        transaction.description,
        transaction.reference or "",
        _write_amount(transaction.total_amount),
        _write_flag(transaction.is_balanced),
        transaction.category or "",
        transaction.financial_year,
        _write_stamp(transaction.created_at),
        _write_stamp(transaction.updated_at),
        encode_entries(transaction.entries),
    ]


def decode_transaction(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[Transaction]:
    def build(c: dict[str, str]) -> Transaction:
        return Transaction(
            id=_cell(c, "ID"),
            date=_cell(c, "Date"),
            description=_cell(c, "Description"),
            reference=_optional(_cell(c, "Reference")),
            total_amount=_amount(_cell(c, "TotalAmount")),
            is_balanced=_flag(_cell(c, "IsBalanced")),
            category=_optional(_cell(c, "Category")),
            financial_year=_cell(c, "FinancialYear"),
            created_at=_optional(_cell(c, "CreatedAt")),
            updated_at=_optional(_cell(c, "UpdatedAt")),
            entries=decode_entries(_cell(c, "Entries")),
        )

    return _decode("transaction", header or TRANSACTION_COLUMNS, row, build)


# =============================================================================
# CASHBOOK
# =============================================================================

def encode_cashbook_entry(entry: CashbookEntry) -> list[str]:
    return [
        entry.id,
        entry.date.isoformat(),
        entry.description,
        entry.bank_account,
        entry.type,
        _write_amount(entry.amount),
        _write_amount(entry.balance),
        entry.category,
        entry.reference or "",
        _write_flag(entry.reconciled),
        entry.financial_year,
        _write_stamp(entry.created_at),
    ]


def decode_cashbook_entry(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[CashbookEntry]:
    def build(c: dict[str, str]) -> CashbookEntry:
        return CashbookEntry(
            id=_cell(c, "ID"),
            date=_cell(c, "Date"),
            description=_cell(c, "Description"),
            bank_account=_cell(c, "BankAccount"),
            type=_cell(c, "Type"),
            amount=_amount(_cell(c, "Amount")),
            balance=_amount(_cell(c, "Balance")),
            category=_cell(c, "Category"),
            reference=_optional(_cell(c, "Reference")),
            reconciled=_flag(_cell(c, "Reconciled")),
            financial_year=_cell(c, "FinancialYear"),
            created_at=_optional(_cell(c, "CreatedAt")),
        )

    return _decode("cashbook_entry", header or CASHBOOK_COLUMNS, row, build)


# =============================================================================
# PORTFOLIO
# =============================================================================

def encode_investment(investment: Investment) -> list[str]:
    return [
        investment.id,
        investment.symbol,
        investment.name,
        investment.type,
        _write_amount(investment.quantity),
        _write_amount(investment.average_price),
        _write_amount(investment.current_price),
        _write_amount(investment.total_investment),
        _write_amount(investment.current_value),
        _write_amount(investment.gain_loss),
        _write_amount(investment.gain_loss_percentage),
        _write_stamp(investment.last_updated),
        investment.financial_year,
    ]


def decode_investment(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[Investment]:
    def build(c: dict[str, str]) -> Investment:
        return Investment(
            id=_cell(c, "ID"),
            symbol=_cell(c, "Symbol"),
            name=_cell(c, "Name"),
            type=_cell(c, "Type") or "other",
            quantity=_amount(_cell(c, "Quantity")),
            average_price=_amount(_cell(c, "AveragePrice")),
            current_price=_amount(_cell(c, "CurrentPrice")),
            total_investment=_amount(_cell(c, "TotalInvestment")),
            current_value=_amount(_cell(c, "CurrentValue")),
            gain_loss=_amount(_cell(c, "GainLoss")),
            gain_loss_percentage=_amount(_cell(c, "GainLossPercentage")),
            last_updated=_optional(_cell(c, "LastUpdated")),
            financial_year=_cell(c, "FinancialYear"),
        )

    return _decode("investment", header or INVESTMENT_COLUMNS, row, build)


def encode_investment_transaction(trade: InvestmentTransaction) -> list[str]:
    return [
        trade.id,
        trade.investment_id,
        trade.date.isoformat(),
        trade.type.value,
        _write_amount(trade.quantity),
        _write_amount(trade.price),
        _write_amount(trade.total_amount),
        _write_amount(trade.fees),
        trade.notes or "",
        trade.financial_year,
        _write_stamp(trade.created_at),
    ]


def decode_investment_transaction(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[InvestmentTransaction]:
    def build(c: dict[str, str]) -> InvestmentTransaction:
        return InvestmentTransaction(
            id=_cell(c, "ID"),
            investment_id=_cell(c, "InvestmentID"),
            date=_cell(c, "Date"),
            type=_cell(c, "Type").lower(),
            quantity=_amount(_cell(c, "Quantity")),
            price=_amount(_cell(c, "Price")),
            total_amount=_amount(_cell(c, "TotalAmount")),
            fees=_amount(_cell(c, "Fees")),
            notes=_optional(_cell(c, "Notes")),
            financial_year=_cell(c, "FinancialYear"),
            created_at=_optional(_cell(c, "CreatedAt")),
        )

    return _decode(
        "investment_transaction",
        header or INVESTMENT_TRANSACTION_COLUMNS,
        row,
        build,
    )


# =============================================================================
# CATEGORIES, DASHBOARD, AUDIT
# =============================================================================

def encode_category(category: Category) -> list[str]:
    return [
        category.id,
        category.name,
        category.type.value,
        _write_flag(category.is_active),
        _write_stamp(category.created_at),
    ]


def decode_category(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[Category]:
    def build(c: dict[str, str]) -> Category:
        return Category(
            id=_cell(c, "ID"),
            name=_cell(c, "Name"),
            type=_cell(c, "Type").lower(),
            is_active=_flag(_cell(c, "IsActive")),
            created_at=_optional(_cell(c, "CreatedAt")),
        )

    return _decode("category", header or CATEGORY_COLUMNS, row, build)


def encode_dashboard_summary(summary: FinancialSummary) -> list[list[str]]:
    """One `Metric, Value, LastUpdated` row per headline number."""
    stamp = _write_stamp(summary.last_updated)
    metrics = [
        ("Total Assets", summary.total_assets),
        ("Total Liabilities", summary.total_liabilities),
        ("Net Worth", summary.net_worth),
        ("Monthly Income", summary.monthly_income),
        ("Monthly Expenses", summary.monthly_expenses),
        ("Investment Value", summary.investment_value),
        ("Cash Balance", summary.cash_balance),
    ]
    return [[name, _write_amount(value), stamp] for name, value in metrics]


def decode_audit_event(
    row: list,
    header: Optional[list[str]] = None,
) -> Optional[AuditEvent]:
    def build(c: dict[str, str]) -> AuditEvent:
        details = _cell(c, "details_json")
        return AuditEvent(
            event_id=_cell(c, "event_id"),
            timestamp=_cell(c, "timestamp"),
            event_type=_cell(c, "event_type"),
            severity=_cell(c, "severity"),
            entity_type=_optional(_cell(c, "entity_type")),
            entity_id=_optional(_cell(c, "entity_id")),
            correlation_id=_optional(_cell(c, "correlation_id")),
            description=_cell(c, "description"),
            details=json.loads(details) if details else {},
            error_message=_optional(_cell(c, "error_message")),
            is_user_action=_cell(c, "is_user_action").lower() == "true",
        )

    return _decode("audit_event", header or AUDIT_COLUMNS, row, build)
