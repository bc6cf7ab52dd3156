"""
Core Data Models for Personal Ledger

These models define the schemas for all records flowing through the system:
accounts, double-entry transactions, cashbook entries and investments, plus
the derived results the calculation layer produces.

They are designed to:
1. Be immutable snapshots (frozen) - calculations return new records
2. Use Decimal for money so tolerance checks are exact
3. Tolerate unknown type labels coming back from the spreadsheet
4. Be serializable for storage and logging

DESIGN DECISION: Entity `type` fields on stored records are kept as raw
strings. The enums below are `str` enums, so `account.type == AccountType.ASSET`
works for known values while an unknown label simply matches nothing and
contributes zero to every aggregate.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


ZERO = Decimal("0")


def utc_now() -> dt.datetime:
    """Timezone-aware current time, used for created/updated stamps."""
    return dt.datetime.now(dt.timezone.utc)


def _plain_label(value):
    """Store enum members as their raw string value."""
    return getattr(value, "value", value)


# Enum members are stored as their raw value; unknown labels pass through.
TypeLabel = Annotated[str, BeforeValidator(_plain_label)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """
    Chart-of-accounts classification.

    The type decides the normal-balance side of the account:
    debits increase ASSET and EXPENSE, credits increase the rest.
    """
    ASSET = "asset"
    LIABILITY = "liability"
    INCOME = "income"
    EXPENSE = "expense"
    EQUITY = "equity"


class CashbookEntryType(str, Enum):
    """Direction of a bank/cash movement."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class InvestmentType(str, Enum):
    STOCK = "stock"
    MUTUAL_FUND = "mutual_fund"
    BOND = "bond"
    CRYPTO = "crypto"
    OTHER = "other"


class InvestmentTransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Account(BaseModel):
    """
    A ledger account.

    `balance` is a cached value. The source of truth is
    `calculate_account_balance` over the transaction journal; the cache is
    rewritten whenever a transaction touching the account is recorded.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Account code, e.g. 1004")
    name: str = Field(..., min_length=1, max_length=200)
    type: TypeLabel = Field(..., description="One of AccountType; fixed at creation")
    sub_type: str = Field(
        default="",
        description="Free-text classification (Cash, Bank, Credit Card...)"
    )
    balance: Decimal = ZERO
    is_active: bool = True
    created_at: Optional[dt.datetime] = None
    financial_year: str = ""


class TransactionEntry(BaseModel):
    """
    One line of a double-entry transaction.

    Exactly one of debit/credit is expected to be non-zero. The model does
    not enforce it; `validate_transaction` reports it.

    Serializes with camelCase keys because the entries are stored as a JSON
    column in the Transactions sheet.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    account_id: str
    account_name: str = ""
    debit: Decimal = ZERO
    credit: Decimal = ZERO


class Transaction(BaseModel):
    """
    A journal transaction.

    `total_amount` and `is_balanced` are caches of `validate_double_entry`
    computed when the transaction is recorded.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    date: dt.date
    description: str
    reference: Optional[str] = None
    category: Optional[str] = None
    entries: list[TransactionEntry] = Field(default_factory=list)
    total_amount: Decimal = ZERO
    is_balanced: bool = False
    financial_year: str = ""
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class EntryDraft(BaseModel):
    """An entry as typed into a form or API payload - nothing guaranteed."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    account_id: Optional[str] = None
    account_name: Optional[str] = None
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None


class TransactionDraft(BaseModel):
    """
    A transaction that has not been validated yet.

    All fields are optional because validation must be able to report
    every missing piece at once.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: Optional[dt.date] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    category: Optional[str] = None
    entries: Optional[list[EntryDraft]] = None


class CashbookEntry(BaseModel):
    """
    A bank or cash book line.

    `balance` is only ever set by `calculate_running_balance`.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    date: dt.date
    description: str = ""
    bank_account: str = ""
    type: TypeLabel = Field(..., description="One of CashbookEntryType")
    amount: Decimal = Field(default=ZERO, ge=0)
    balance: Decimal = ZERO
    category: str = ""
    reference: Optional[str] = None
    reconciled: bool = False
    financial_year: str = ""
    created_at: Optional[dt.datetime] = None


class Investment(BaseModel):
    """
    A holding in the portfolio.

    The four derived fields are caches refreshed by `refresh_investment`.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    symbol: str
    name: str = ""
    type: TypeLabel = InvestmentType.OTHER.value
    quantity: Decimal = ZERO
    average_price: Decimal = ZERO
    current_price: Decimal = ZERO
    total_investment: Decimal = ZERO
    current_value: Decimal = ZERO
    gain_loss: Decimal = ZERO
    gain_loss_percentage: Decimal = ZERO
    last_updated: Optional[dt.datetime] = None
    financial_year: str = ""


class InvestmentTransaction(BaseModel):
    """A buy or sell against an existing holding."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    investment_id: str
    date: dt.date
    type: InvestmentTransactionType
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    total_amount: Decimal = ZERO
    fees: Decimal = Field(default=ZERO, ge=0)
    notes: Optional[str] = None
    financial_year: str = ""
    created_at: Optional[dt.datetime] = None


class Category(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    is_active: bool = True
    created_at: Optional[dt.datetime] = None


# =============================================================================
# VALIDATION RESULTS
# =============================================================================

class DoubleEntryValidation(BaseModel):
    """Result of checking that debits and credits net to zero."""

    is_valid: bool
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal


class ValidationResult(BaseModel):
    """
    Outcome of a validation pass.

    Errors are human-readable messages, collected in one pass so a form can
    show every problem at once.
    """

    is_valid: bool
    errors: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)


# =============================================================================
# CALCULATION RESULTS
# =============================================================================

class NetWorth(BaseModel):
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


class InvestmentMetrics(BaseModel):
    total_investment: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal


class PortfolioValue(BaseModel):
    total_investment: Decimal
    current_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal


class CategoryAmount(BaseModel):
    category: str
    amount: Decimal


class CashFlow(BaseModel):
    total_inflow: Decimal
    total_outflow: Decimal
    net_cash_flow: Decimal


class StatementLine(BaseModel):
    """One account's line on a balance sheet or income statement."""

    account_id: str
    account_name: str
    account_type: str
    amount: Decimal
    percentage: Optional[Decimal] = Field(
        default=None,
        description="Share of the section total, in percent"
    )


class BalanceSheet(BaseModel):
    assets: list[StatementLine] = Field(default_factory=list)
    liabilities: list[StatementLine] = Field(default_factory=list)
    equity: list[StatementLine] = Field(default_factory=list)
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    as_of_date: dt.date
    financial_year: str


class IncomeStatement(BaseModel):
    income: list[StatementLine] = Field(default_factory=list)
    expenses: list[StatementLine] = Field(default_factory=list)
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    period_from: Optional[dt.date] = None
    period_to: Optional[dt.date] = None
    financial_year: str = ""


class FinancialSummary(BaseModel):
    """Headline numbers shown on the dashboard and mirrored to its sheet."""

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    investment_value: Decimal
    cash_balance: Decimal
    last_updated: dt.datetime


class FinancialYearInfo(BaseModel):
    year: str
    start_date: dt.date
    end_date: dt.date
    is_current: bool


class DashboardData(BaseModel):
    financial_year: str
    month: str
    summary: FinancialSummary
    portfolio: PortfolioValue
    recent_transactions: list[Transaction] = Field(default_factory=list)
    expenses_by_category: list[CategoryAmount] = Field(default_factory=list)
    investment_performance: list[Investment] = Field(default_factory=list)
