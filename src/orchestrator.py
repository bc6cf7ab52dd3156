"""
Main Orchestrator for Personal Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Bookkeeping (accounts, journal, cashbook, portfolio)
2. Dashboard (snapshot → calculations → summary)
3. Login (password → signed session)

DESIGN DECISION: The calculation layer is pure; every read and write goes
through here. The orchestrator enforces the boundaries:
- No transaction is stored unless it validates
- Cached fields (account balances, running balances, investment metrics)
  are recomputed and written back on every mutation that touches them
- Every step is audited

This is the "glue" that keeps the cached numbers in the sheet honest
even when rows are edited by hand between writes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.auth import AuthSession, create_session, verify_session
from src.calculations import (
    apply_investment_transaction,
    build_balance_sheet,
    build_financial_summary,
    build_income_statement,
    calculate_account_balance,
    calculate_expenses_by_category,
    calculate_portfolio_value,
    calculate_running_balance,
    generate_account_code,
    refresh_investment,
)
from src.config import AuthSettings, Settings, get_settings
from src.models.financial import (
    ZERO,
    Account,
    BalanceSheet,
    CashbookEntry,
    CashbookEntryType,
    Category,
    CategoryType,
    DashboardData,
    IncomeStatement,
    Investment,
    InvestmentTransaction,
    InvestmentTransactionType,
    Transaction,
    TransactionDraft,
    TransactionEntry,
)
from src.periods import (
    get_current_month,
    get_financial_year_dates,
    get_months_in_financial_year,
    is_date_in_financial_year,
    parse_financial_year,
)
from src.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from src.services.storage.records import (
    new_account,
    new_cashbook_entry,
    new_category,
    new_investment,
    new_investment_transaction,
    new_transaction,
)
from src.validation import (
    summarize_validation,
    validate_double_entry,
    validate_password,
    validate_transaction,
)


logger = structlog.get_logger(__name__)

Number = Union[Decimal, int, float, str]


class TransactionRejectedError(ValueError):
    """A transaction failed validation and was not stored."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class AuthenticationError(Exception):
    """Login was refused."""
    pass


class LedgerFlow:
    """
    Orchestrates every write to the books.

    Flow for a journal transaction:
    1. Validate → reject with every error at once
    2. Stamp → total amount and balanced flag from the entries
    3. Append → one row in the journal
    4. Refresh → recompute and write back the balance of each touched account
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    # -- Accounts ----------------------------------------------------------

    async def create_account(
        self,
        name: str,
        account_type: str,
        sub_type: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Open an account under the next free code for its type.

        Codes are derived from the accounts currently stored, so two
        sessions creating the same type at once can collide; the storage
        layer then raises DuplicateError.
        """
        correlation_id = correlation_id or create_correlation_id()

        existing = await self._storage.get_accounts()
        code = generate_account_code(account_type, sub_type, existing)
        account = new_account(code, name, account_type, sub_type)

        await self._storage.create_account(account)
        logger.info("account_created", account_id=code, account_type=account.type)

        if self._audit_logger:
            await self._audit_logger.log_account_created(
                account_id=account.id,
                name=account.name,
                account_type=account.type,
                correlation_id=correlation_id,
            )
        return account

    async def refresh_account_balances(
        self,
        account_ids: Optional[Iterable[str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Account]:
        """
        Recompute cached balances from the whole journal and write back
        the ones that changed.

        Args:
            account_ids: Restrict to these accounts; None means all

        Returns:
            Every account considered, with its recomputed balance
        """
        correlation_id = correlation_id or create_correlation_id()
        wanted = set(account_ids) if account_ids is not None else None

        accounts = await self._storage.get_accounts()
        transactions = await self._storage.get_transactions()

        refreshed = []
        for account in accounts:
            if wanted is not None and account.id not in wanted:
                continue

            balance = calculate_account_balance(account, transactions)
            if balance != account.balance:
                updated = account.model_copy(update={"balance": balance})
                await self._storage.update_account(updated)
                if self._audit_logger:
                    await self._audit_logger.log_balance_refreshed(
                        account_id=account.id,
                        old_balance=account.balance,
                        new_balance=balance,
                        correlation_id=correlation_id,
                    )
                account = updated
            refreshed.append(account)

        return refreshed

    # -- Journal -----------------------------------------------------------

    async def record_transaction(
        self,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate and store a journal transaction.

        Raises:
            TransactionRejectedError: If validation found any error
        """
        correlation_id = correlation_id or create_correlation_id()

        result = validate_transaction(draft)
        if not result.is_valid:
            logger.info("transaction_rejected", errors=result.error_count)
            if self._audit_logger:
                await self._audit_logger.log_transaction_rejected(
                    errors=result.errors,
                    correlation_id=correlation_id,
                )
            raise TransactionRejectedError(result.errors)

        names = {a.id: a.name for a in await self._storage.get_accounts()}
        entries = [
            TransactionEntry(
                account_id=entry.account_id,
                account_name=entry.account_name or names.get(entry.account_id, ""),
                debit=entry.debit or ZERO,
                credit=entry.credit or ZERO,
            )
            for entry in draft.entries
        ]
        balance = validate_double_entry(entries)

        transaction = new_transaction(
            date=draft.date,
            description=draft.description,
            entries=entries,
            total_amount=balance.total_debits,
            is_balanced=balance.is_valid,
            reference=draft.reference,
            category=draft.category,
        )
        await self._storage.create_transaction(transaction)

        if self._audit_logger:
            await self._audit_logger.log_transaction_recorded(
                transaction_id=transaction.id,
                description=transaction.description,
                amount=transaction.total_amount,
                entry_count=len(entries),
                correlation_id=correlation_id,
            )

        await self.refresh_account_balances(
            {entry.account_id for entry in entries},
            correlation_id=correlation_id,
        )
        return transaction

    # -- Cashbook ----------------------------------------------------------

    async def cashbook(
        self,
        financial_year: str,
        bank_account: Optional[str] = None,
    ) -> list[CashbookEntry]:
        """
        Cashbook lines for one financial year in date order, optionally for a
        single bank account.

        Balances are the stored per-bank running totals, so a later year
        carries forward everything recorded before it.
        """
        entries = await self._storage.get_cashbook_entries(financial_year)
        return sorted(
            (e for e in entries if bank_account is None or e.bank_account == bank_account),
            key=lambda e: e.date,
        )

    async def record_cashbook_entry(
        self,
        entry_date: date,
        description: str,
        bank_account: str,
        entry_type: str,
        amount: Number,
        category: str = "",
        reference: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> CashbookEntry:
        """
        Append a cashbook line and re-run the running balance for its bank
        account.

        Returns:
            The stored entry with its running balance filled in

        Raises:
            ValueError: If the entry type is not deposit or withdrawal
        """
        correlation_id = correlation_id or create_correlation_id()
        entry_type = CashbookEntryType(entry_type).value

        entry = new_cashbook_entry(
            date=entry_date,
            description=description,
            bank_account=bank_account,
            entry_type=entry_type,
            amount=amount,
            category=category,
            reference=reference,
        )
        await self._storage.create_cashbook_entry(entry)

        book = [
            e for e in await self._storage.get_cashbook_entries()
            if e.bank_account == bank_account
        ]
        stored_balances = {e.id: e.balance for e in book}

        for recomputed in calculate_running_balance(book):
            if recomputed.balance != stored_balances[recomputed.id]:
                await self._storage.update_cashbook_entry(recomputed)
            if recomputed.id == entry.id:
                entry = recomputed

        if self._audit_logger:
            await self._audit_logger.log_cashbook_entry_recorded(
                entry_id=entry.id,
                bank_account=bank_account,
                entry_type=entry_type,
                amount=entry.amount,
                correlation_id=correlation_id,
            )
        return entry

    # -- Portfolio ---------------------------------------------------------

    async def _get_investment(self, investment_id: str) -> Investment:
        for investment in await self._storage.get_investments():
            if investment.id == investment_id:
                return investment
        raise NotFoundError(f"Investment not found: {investment_id}")

    async def add_investment(
        self,
        symbol: str,
        name: str,
        investment_type: str,
        quantity: Number,
        average_price: Number,
        current_price: Optional[Number] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Investment:
        correlation_id = correlation_id or create_correlation_id()

        investment = new_investment(
            symbol=symbol,
            name=name,
            investment_type=investment_type,
            quantity=quantity,
            average_price=average_price,
            current_price=current_price,
        )
        await self._storage.create_investment(investment)

        if self._audit_logger:
            await self._audit_logger.log_investment_added(
                investment_id=investment.id,
                symbol=investment.symbol,
                correlation_id=correlation_id,
            )
        return investment

    async def record_investment_transaction(
        self,
        investment_id: str,
        trade_date: date,
        trade_type: InvestmentTransactionType,
        quantity: Number,
        price: Number,
        fees: Optional[Number] = None,
        notes: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Investment, InvestmentTransaction]:
        """
        Buy or sell against a holding.

        The holding is updated only after the trade is known to apply, so an
        oversold sell leaves both sheets untouched.

        Raises:
            NotFoundError: If the holding does not exist
            InsufficientQuantityError: If selling more than is held
            StorageError: If the trade history row cannot be written
        """
        correlation_id = correlation_id or create_correlation_id()

        investment = await self._get_investment(investment_id)
        trade = new_investment_transaction(
            investment_id=investment_id,
            date=trade_date,
            trade_type=InvestmentTransactionType(trade_type),
            quantity=quantity,
            price=price,
            fees=fees,
            notes=notes,
        )
        updated = apply_investment_transaction(investment, trade)

        await self._storage.update_investment(updated)
        try:
            await self._storage.create_investment_transaction(trade)
        except StorageError as e:
            # Holding already reflects the trade; only the history row is missing
            logger.error(
                "trade_history_write_failed",
                investment_id=investment_id,
                trade_id=trade.id,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="create_investment_transaction",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_investment_traded(
                investment_id=investment_id,
                trade_type=trade.type.value,
                quantity=trade.quantity,
                price=trade.price,
                correlation_id=correlation_id,
            )
        return updated, trade

    async def update_investment_price(
        self,
        investment_id: str,
        current_price: Number,
        correlation_id: Optional[UUID] = None,
    ) -> Investment:
        correlation_id = correlation_id or create_correlation_id()

        investment = await self._get_investment(investment_id)
        updated = refresh_investment(
            investment.model_copy(
                update={"current_price": Decimal(str(current_price))}
            )
        )
        await self._storage.update_investment(updated)

        if self._audit_logger:
            await self._audit_logger.log_price_updated(
                investment_id=investment_id,
                old_price=investment.current_price,
                new_price=updated.current_price,
                correlation_id=correlation_id,
            )
        return updated

    # -- Categories --------------------------------------------------------

    async def add_category(self, name: str, category_type: CategoryType) -> Category:
        category = new_category(name, CategoryType(category_type))
        return await self._storage.create_category(category)


class DashboardFlow:
    """
    Builds the dashboard and the period statements for a financial year.

    The chart of accounts and the portfolio carry across years, so they are
    read whole; the journal is read for the selected year only.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        recent_limit: int = 10,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._recent_limit = recent_limit

    @staticmethod
    def default_month(financial_year: str, today: Optional[date] = None) -> str:
        """This month inside the current year, else the year's last month."""
        today = today or date.today()
        if is_date_in_financial_year(today, financial_year):
            return get_current_month(today)
        return get_months_in_financial_year(financial_year)[-1]

    async def build(
        self,
        financial_year: str,
        month: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> DashboardData:
        """
        Assemble the dashboard and mirror its summary to storage.

        Raises:
            InvalidFinancialYearError: If the year label is malformed
        """
        correlation_id = correlation_id or create_correlation_id()
        parse_financial_year(financial_year)
        month = month or self.default_month(
            financial_year, now.date() if now else None
        )

        accounts = await self._storage.get_accounts()
        transactions = await self._storage.get_transactions(financial_year)
        investments = await self._storage.get_investments()

        summary = build_financial_summary(
            accounts, transactions, investments, month, now=now
        )
        start_date, end_date = get_financial_year_dates(financial_year)

        recent = sorted(
            transactions,
            key=lambda t: (
                t.date,
                t.created_at.timestamp() if t.created_at else 0,
            ),
            reverse=True,
        )[: self._recent_limit]

        dashboard = DashboardData(
            financial_year=financial_year,
            month=month,
            summary=summary,
            portfolio=calculate_portfolio_value(investments),
            recent_transactions=recent,
            expenses_by_category=calculate_expenses_by_category(
                transactions, accounts, start_date, end_date
            ),
            investment_performance=sorted(
                investments,
                key=lambda i: i.gain_loss_percentage,
                reverse=True,
            ),
        )

        try:
            await self._storage.update_dashboard_summary(summary)
        except StorageError as e:
            # The page still renders from the computed numbers
            logger.warning("dashboard_mirror_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="update_dashboard_summary",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )

        if self._audit_logger:
            await self._audit_logger.log_dashboard_refreshed(
                financial_year=financial_year,
                net_worth=summary.net_worth,
                correlation_id=correlation_id,
            )
        return dashboard

    async def statements(
        self,
        financial_year: str,
        as_of: Optional[date] = None,
    ) -> tuple[BalanceSheet, IncomeStatement]:
        """Balance sheet at `as_of` (default: year end) and the year's P&L."""
        start_date, end_date = get_financial_year_dates(financial_year)
        accounts = await self._storage.get_accounts()
        transactions = await self._storage.get_transactions(financial_year)

        balance_sheet = build_balance_sheet(
            accounts, financial_year, as_of or end_date
        )
        income_statement = build_income_statement(
            transactions, accounts, start_date, end_date, financial_year
        )
        return balance_sheet, income_statement


class AuthFlow:
    """Password login and session checks."""

    def __init__(
        self,
        settings: AuthSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings
        self._audit_logger = audit_logger

    async def login(self, password: Optional[str]) -> str:
        """
        Exchange the password for a session token.

        Raises:
            AuthenticationError: If the password is missing or wrong
        """
        result = validate_password(password)
        if not result.is_valid:
            await self._log_login(False, result.errors[0])
            raise AuthenticationError(summarize_validation(result))

        token = create_session(password, self._settings)
        if token is None:
            await self._log_login(False, "invalid_password")
            raise AuthenticationError("Invalid password")

        await self._log_login(True)
        return token

    def verify(
        self,
        token: Optional[str],
        now: Optional[datetime] = None,
    ) -> Optional[AuthSession]:
        return verify_session(token, self._settings, now=now)

    async def _log_login(self, succeeded: bool, reason: str = "") -> None:
        if self._audit_logger:
            await self._audit_logger.log_login(succeeded, reason)


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> tuple[LedgerFlow, DashboardFlow, AuthFlow, LedgerStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False to run on in-memory storage.
        settings: Defaults to the cached application settings

    Returns:
        (ledger_flow, dashboard_flow, auth_flow, ledger_storage)
    """
    settings = settings or get_settings()
    backend = settings.app.storage_backend if use_storage else "memory"

    ledger_storage: LedgerStorageInterface
    if backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            sheets_client.get_spreadsheet()
            ledger_storage = GoogleSheetsLedgerStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            backend = "memory"

    if backend == "memory":
        ledger_storage = InMemoryLedgerStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    ledger_flow = LedgerFlow(ledger_storage, audit_logger)
    dashboard_flow = DashboardFlow(
        ledger_storage,
        audit_logger,
        recent_limit=settings.app.recent_transactions_limit,
    )
    auth_flow = AuthFlow(settings.auth, audit_logger)

    return ledger_flow, dashboard_flow, auth_flow, ledger_storage
