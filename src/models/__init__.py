"""
Data Models Package

This package contains all Pydantic models used in the Personal Ledger system.
All data flowing through the system must conform to these schemas.
"""

from src.models.financial import (
    Account,
    AccountType,
    BalanceSheet,
    CashbookEntry,
    CashbookEntryType,
    CashFlow,
    Category,
    CategoryAmount,
    CategoryType,
    DashboardData,
    DoubleEntryValidation,
    EntryDraft,
    FinancialSummary,
    FinancialYearInfo,
    IncomeStatement,
    Investment,
    InvestmentMetrics,
    InvestmentTransaction,
    InvestmentTransactionType,
    InvestmentType,
    NetWorth,
    PortfolioValue,
    StatementLine,
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

__all__ = [
    # Ledger records
    "Account",
    "AccountType",
    "CashbookEntry",
    "CashbookEntryType",
    "Category",
    "CategoryType",
    "EntryDraft",
    "Investment",
    "InvestmentTransaction",
    "InvestmentTransactionType",
    "InvestmentType",
    "Transaction",
    "TransactionDraft",
    "TransactionEntry",
    # Results
    "BalanceSheet",
    "CashFlow",
    "CategoryAmount",
    "DashboardData",
    "DoubleEntryValidation",
    "FinancialSummary",
    "FinancialYearInfo",
    "IncomeStatement",
    "InvestmentMetrics",
    "NetWorth",
    "PortfolioValue",
    "StatementLine",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
