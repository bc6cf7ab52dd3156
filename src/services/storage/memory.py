"""
In-Memory Storage

Same contract as the Google Sheets backend, held in Python lists. Used by
the test suite and for running the app without credentials
(`STORAGE_BACKEND=memory`).
"""

from typing import Optional, TypeVar
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
from src.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


T = TypeVar("T")


def _for_year(records: list[T], financial_year: Optional[str]) -> list[T]:
    if not financial_year:
        return list(records)
    return [r for r in records if r.financial_year == financial_year]


def _replace(records: list[T], record: T, kind: str) -> T:
    for idx, existing in enumerate(records):
        if existing.id == record.id:
            records[idx] = record
            return record
    raise NotFoundError(f"{kind} record not found: {record.id}")


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    List-backed ledger storage.

    Insertion order is preserved, like rows appended to a sheet.
    """

    def __init__(self):
        self.accounts: list[Account] = []
        self.transactions: list[Transaction] = []
        self.cashbook: list[CashbookEntry] = []
        self.investments: list[Investment] = []
        self.investment_transactions: list[InvestmentTransaction] = []
        self.categories: list[Category] = []
        self.dashboard: Optional[FinancialSummary] = None
        self.initialized = False

    async def initialize(self) -> None:
        self.initialized = True

    async def get_accounts(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Account]:
        return _for_year(self.accounts, financial_year)

    async def create_account(self, account: Account) -> Account:
        if any(a.id == account.id for a in self.accounts):
            raise DuplicateError(f"Account already exists: {account.id}")
        self.accounts.append(account)
        return account

    async def update_account(self, account: Account) -> Account:
        return _replace(self.accounts, account, "accounts")

    async def get_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Transaction]:
        return _for_year(self.transactions, financial_year)

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        self.transactions.append(transaction)
        return transaction

    async def get_cashbook_entries(
        self,
        financial_year: Optional[str] = None,
    ) -> list[CashbookEntry]:
        return _for_year(self.cashbook, financial_year)

    async def create_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        self.cashbook.append(entry)
        return entry

    async def update_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        return _replace(self.cashbook, entry, "cashbook")

    async def get_investments(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Investment]:
        return _for_year(self.investments, financial_year)

    async def create_investment(self, investment: Investment) -> Investment:
        self.investments.append(investment)
        return investment

    async def update_investment(self, investment: Investment) -> Investment:
        return _replace(self.investments, investment, "investments")

    async def get_investment_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[InvestmentTransaction]:
        return _for_year(self.investment_transactions, financial_year)

    async def create_investment_transaction(
        self,
        trade: InvestmentTransaction,
    ) -> InvestmentTransaction:
        self.investment_transactions.append(trade)
        return trade

    async def get_categories(self) -> list[Category]:
        return list(self.categories)

    async def create_category(self, category: Category) -> Category:
        self.categories.append(category)
        return category

    async def update_dashboard_summary(self, summary: FinancialSummary) -> None:
        self.dashboard = summary


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e
            for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
