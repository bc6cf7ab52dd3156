"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the storage backend because:
1. The owner can view and correct the books directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (a journal write and its balance refreshes are separate calls)
- Limited query capabilities (we read whole sheets and filter in Python)

The implementation follows the abstract interface, so we can swap
to PostgreSQL/SQLite later without changing business logic.
"""

from pathlib import Path
from typing import Callable, Optional, TypeVar
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import GoogleSheetsSettings, get_settings
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
from src.services.storage import codecs
from src.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication, worksheet creation and provides retry logic
    for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication. A missing
        credentials file fails at once; other failures are retried.
        """
        if self._client is None:
            if not Path(self._settings.credentials_path).exists():
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            self._client = self._authorize()

        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _authorize(self) -> gspread.Client:
        try:
            credentials = Credentials.from_service_account_file(
                self._settings.credentials_path,
                scopes=SCOPES,
            )
            return gspread.authorize(credentials)
        except Exception as e:
            raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(
        self,
        title: str,
        headers: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get or create a worksheet; a new one starts with its header row."""
        if title in self._worksheets:
            return self._worksheets[title]

        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(headers),
            )
            sheet.append_row(headers)
            logger.info("worksheet_created", title=title, columns=len(headers))

        self._worksheets[title] = sheet
        return sheet


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    One worksheet per record kind, one record per row. Transaction entries
    are JSON-serialized into a single column.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        names = self._client.settings
        self._layout = {
            "accounts": (names.accounts_sheet_name, codecs.ACCOUNT_COLUMNS),
            "transactions": (names.transactions_sheet_name, codecs.TRANSACTION_COLUMNS),
            "cashbook": (names.cashbook_sheet_name, codecs.CASHBOOK_COLUMNS),
            "investments": (names.investments_sheet_name, codecs.INVESTMENT_COLUMNS),
            "investment_transactions": (
                names.investment_transactions_sheet_name,
                codecs.INVESTMENT_TRANSACTION_COLUMNS,
            ),
            "categories": (names.categories_sheet_name, codecs.CATEGORY_COLUMNS),
            "dashboard": (names.dashboard_sheet_name, codecs.DASHBOARD_COLUMNS),
            "config": (names.config_sheet_name, codecs.CONFIG_COLUMNS),
        }

    def _sheet(self, kind: str) -> gspread.Worksheet:
        title, headers = self._layout[kind]
        return self._client.get_worksheet(title, headers)

    def _read(
        self,
        kind: str,
        decode: Callable[..., Optional[T]],
        financial_year: Optional[str] = None,
    ) -> list[T]:
        """Decode every data row, skipping blanks and malformed rows."""
        try:
            values = self._sheet(kind).get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {kind}: {e}")

        if not values:
            return []
        header = [cell.strip() for cell in values[0]] or None

        records = []
        for row in values[1:]:
            record = decode(row, header)
            if record is None:
                continue
            if financial_year and record.financial_year != financial_year:
                continue
            records.append(record)
        return records

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append(self, kind: str, row: list[str]) -> None:
        try:
            self._sheet(kind).append_row(row, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to append to {kind}: {e}")

    def _row_number(self, kind: str, record_id: str) -> Optional[int]:
        """1-based sheet row holding `record_id`, or None."""
        ids = self._sheet(kind).col_values(1)
        for idx, value in enumerate(ids[1:], start=2):  # row 1 is the header
            if value.strip() == record_id:
                return idx
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(NotFoundError),
        reraise=True,
    )
    def _replace(self, kind: str, record_id: str, row: list[str]) -> None:
        try:
            row_number = self._row_number(kind, record_id)
            if row_number is None:
                raise NotFoundError(f"{kind} record not found: {record_id}")
            self._sheet(kind).update(
                range_name=f"A{row_number}",
                values=[row],
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {kind}: {e}")

    async def initialize(self) -> None:
        for kind in self._layout:
            self._sheet(kind)
        logger.info("sheets_initialized", sheets=len(self._layout))

    # -- Accounts ----------------------------------------------------------

    async def get_accounts(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Account]:
        return self._read("accounts", codecs.decode_account, financial_year)

    async def create_account(self, account: Account) -> Account:
        if self._row_number("accounts", account.id) is not None:
            raise DuplicateError(f"Account already exists: {account.id}")
        self._append("accounts", codecs.encode_account(account))
        return account

    async def update_account(self, account: Account) -> Account:
        self._replace("accounts", account.id, codecs.encode_account(account))
        return account

    # -- Journal -----------------------------------------------------------

    async def get_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Transaction]:
        return self._read("transactions", codecs.decode_transaction, financial_year)

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        self._append("transactions", codecs.encode_transaction(transaction))
        return transaction

    # -- Cashbook ----------------------------------------------------------

    async def get_cashbook_entries(
        self,
        financial_year: Optional[str] = None,
    ) -> list[CashbookEntry]:
        return self._read("cashbook", codecs.decode_cashbook_entry, financial_year)

    async def create_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        self._append("cashbook", codecs.encode_cashbook_entry(entry))
        return entry

    async def update_cashbook_entry(self, entry: CashbookEntry) -> CashbookEntry:
        self._replace("cashbook", entry.id, codecs.encode_cashbook_entry(entry))
        return entry

    # -- Portfolio ---------------------------------------------------------

    async def get_investments(
        self,
        financial_year: Optional[str] = None,
    ) -> list[Investment]:
        return self._read("investments", codecs.decode_investment, financial_year)

    async def create_investment(self, investment: Investment) -> Investment:
        self._append("investments", codecs.encode_investment(investment))
        return investment

    async def update_investment(self, investment: Investment) -> Investment:
        self._replace(
            "investments", investment.id, codecs.encode_investment(investment)
        )
        return investment

    async def get_investment_transactions(
        self,
        financial_year: Optional[str] = None,
    ) -> list[InvestmentTransaction]:
        return self._read(
            "investment_transactions",
            codecs.decode_investment_transaction,
            financial_year,
        )

    async def create_investment_transaction(
        self,
        trade: InvestmentTransaction,
    ) -> InvestmentTransaction:
        self._append(
            "investment_transactions", codecs.encode_investment_transaction(trade)
        )
        return trade

    # -- Categories & dashboard -------------------------------------------

    async def get_categories(self) -> list[Category]:
        return self._read("categories", codecs.decode_category)

    async def create_category(self, category: Category) -> Category:
        self._append("categories", codecs.encode_category(category))
        return category

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def update_dashboard_summary(self, summary: FinancialSummary) -> None:
        rows = codecs.encode_dashboard_summary(summary)
        try:
            self._sheet("dashboard").update(
                range_name=f"A2:C{len(rows) + 1}",
                values=rows,
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to update dashboard: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _audit_sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(
            self._client.settings.audit_sheet_name,
            codecs.AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )

    def _all_events(self) -> list[AuditEvent]:
        try:
            values = self._audit_sheet().get_all_values()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in values[1:]:
            event = codecs.decode_audit_event(row)
            if event is not None:
                events.append(event)
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning(
                "audit_write_failed",
                event_type=event.event_type.value,
                error=str(e),
            )
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._all_events() if e.correlation_id == correlation_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e
            for e in self._all_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._all_events()
        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
