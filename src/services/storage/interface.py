"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the calculation layer decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Reads return whole collections (optionally one financial year); the
calculation layer filters and aggregates in Python.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.financial import (
    Account,
    CashbookEntry,
    Category,
    FinancialSummary,
    Investment,
    InvestmentTransaction,
    Transaction,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Records handed to `create_*` are complete (see `records.py` for the
    factories that assign ids, timestamps and financial years).
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create any missing sheets/tables with their headers."""
        pass

    # -- Accounts ----------------------------------------------------------

    @abstractmethod
    async def get_accounts(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Account]:
        """
        List accounts, optionally restricted to one financial year.

        Rows that cannot be decoded are skipped.
        """
        pass

    @abstractmethod
    async def create_account(self, account: Account) -> Account:
        """
        Append a new account.

        Raises:
            DuplicateError: If an account with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_account(self, account: Account) -> Account:
        """
        Replace an existing account by id.

        Raises:
            NotFoundError: If no account has this id
        """
        pass

    # -- Journal -----------------------------------------------------------

    @abstractmethod
    async def get_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Transaction]:
        pass

    @abstractmethod
    async def create_transaction(self, transaction: Transaction) -> Transaction:
        pass

    # -- Cashbook ----------------------------------------------------------

    @abstractmethod
    async def get_cashbook_entries(
        self,
        financial_year: Optional[str] = None,
    ) -> list[CashbookEntry]:
        pass

    @abstractmethod
    async def create_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        pass

    @abstractmethod
    async def update_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        """
        Raises:
            NotFoundError: If no entry has this id
        """
        pass

    # -- Portfolio ---------------------------------------------------------

    @abstractmethod
    async def get_investments(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Investment]:
        pass

    @abstractmethod
    async def create_investment(self, investment: Investment) -> Investment:
        pass

    @abstractmethod
    async def update_investment(self, investment: Investment) -> Investment:
        """
        Raises:
            NotFoundError: If no investment has this id
        """
        pass

    @abstractmethod
    async def get_investment_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[InvestmentTransaction]:
        pass

    @abstractmethod
    async def create_investment_transaction(
        self,
        trade: InvestmentTransaction,
    ) -> InvestmentTransaction:
        pass

    # -- Categories & dashboard -------------------------------------------

    @abstractmethod
    async def get_categories(self) -> list[Category]:
        pass

    @abstractmethod
    async def create_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    async def update_dashboard_summary(self, summary: FinancialSummary) -> None:
        """Mirror the headline numbers so they are readable in the sheet."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Events sharing a correlation id, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Events about one entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
