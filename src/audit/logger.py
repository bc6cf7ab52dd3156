"""
Audit Logger

DESIGN DECISION: Every write to the books and every login attempt is logged.
This provides:
1. Complete traceability of balances back to the entries that moved them
2. Debugging capability
3. The owner can read the history in the AuditLog sheet

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines through stdlib logging at `level`."""
    logging.basicConfig(format="%(message)s", level=level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Google Sheets (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_account_created(
        self,
        account_id: str,
        name: str,
        account_type: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.account_created(
            account_id=account_id,
            name=name,
            account_type=account_type,
            correlation_id=correlation_id,
        ))

    async def log_balance_refreshed(
        self,
        account_id: str,
        old_balance: Decimal,
        new_balance: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.account_balance_refreshed(
            account_id=account_id,
            old_balance=str(old_balance),
            new_balance=str(new_balance),
            correlation_id=correlation_id,
        ))

    async def log_transaction_recorded(
        self,
        transaction_id: str,
        description: str,
        amount: Decimal,
        entry_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_recorded(
            transaction_id=transaction_id,
            description=description,
            amount=str(amount),
            entry_count=entry_count,
            correlation_id=correlation_id,
        ))

    async def log_transaction_rejected(
        self,
        errors: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_rejected(
            errors=errors,
            correlation_id=correlation_id,
        ))

    async def log_cashbook_entry_recorded(
        self,
        entry_id: str,
        bank_account: str,
        entry_type: str,
        amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.cashbook_entry_recorded(
            entry_id=entry_id,
            bank_account=bank_account,
            entry_type=entry_type,
            amount=str(amount),
            correlation_id=correlation_id,
        ))

    async def log_investment_added(
        self,
        investment_id: str,
        symbol: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.investment_added(
            investment_id=investment_id,
            symbol=symbol,
            correlation_id=correlation_id,
        ))

    async def log_investment_traded(
        self,
        investment_id: str,
        trade_type: str,
        quantity: Decimal,
        price: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.investment_traded(
            investment_id=investment_id,
            trade_type=trade_type,
            quantity=str(quantity),
            price=str(price),
            correlation_id=correlation_id,
        ))

    async def log_price_updated(
        self,
        investment_id: str,
        old_price: Decimal,
        new_price: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.investment_price_updated(
            investment_id=investment_id,
            old_price=str(old_price),
            new_price=str(new_price),
            correlation_id=correlation_id,
        ))

    async def log_dashboard_refreshed(
        self,
        financial_year: str,
        net_worth: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.dashboard_refreshed(
            financial_year=financial_year,
            net_worth=str(net_worth),
            correlation_id=correlation_id,
        ))

    async def log_login(self, succeeded: bool, reason: str = "") -> None:
        if succeeded:
            await self.log(AuditEventBuilder.login_succeeded())
        else:
            await self.log(AuditEventBuilder.login_failed(reason))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., recording a transaction).
    Pass it through all subsequent operations.
    """
    return uuid4()
