"""
Audit Models for Personal Ledger

Every write to the ledger and every login attempt is logged for audit purposes.
This provides:
1. Complete traceability of all bookkeeping changes
2. Debugging information when things go wrong
3. A history the owner can read directly in the spreadsheet

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.financial import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_BALANCE_REFRESHED = "account_balance_refreshed"

    # Journal
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Cashbook
    CASHBOOK_ENTRY_RECORDED = "cashbook_entry_recorded"

    # Portfolio
    INVESTMENT_ADDED = "investment_added"
    INVESTMENT_TRADED = "investment_traded"
    INVESTMENT_PRICE_UPDATED = "investment_price_updated"

    # Dashboard
    DASHBOARD_REFRESHED = "dashboard_refreshed"

    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction', 'investment')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a transaction and its balance refreshes)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account_id, name, type, cid)
        event = AuditEventBuilder.login_failed(reason)
    """

    @staticmethod
    def account_created(
        account_id: str,
        name: str,
        account_type: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account created: {account_id} {name}",
            details={
                "name": name,
                "type": account_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_balance_refreshed(
        account_id: str,
        old_balance: str,
        new_balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_BALANCE_REFRESHED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Balance of {account_id} refreshed: {old_balance} -> {new_balance}",
            details={
                "old_balance": old_balance,
                "new_balance": new_balance,
            },
        )

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        description: str,
        amount: str,
        entry_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction recorded: {description} - {amount}",
            details={
                "amount": amount,
                "entry_count": entry_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        errors: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Transaction rejected with {len(errors)} errors",
            details={
                "errors": errors,
            },
            is_user_action=True,
        )

    @staticmethod
    def cashbook_entry_recorded(
        entry_id: str,
        bank_account: str,
        entry_type: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CASHBOOK_ENTRY_RECORDED,
            entity_type="cashbook_entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Cashbook {entry_type} on {bank_account}: {amount}",
            details={
                "bank_account": bank_account,
                "type": entry_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def investment_added(
        investment_id: str,
        symbol: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_ADDED,
            entity_type="investment",
            entity_id=investment_id,
            correlation_id=correlation_id,
            description=f"Investment added: {symbol}",
            details={"symbol": symbol},
            is_user_action=True,
        )

    @staticmethod
    def investment_traded(
        investment_id: str,
        trade_type: str,
        quantity: str,
        price: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_TRADED,
            entity_type="investment",
            entity_id=investment_id,
            correlation_id=correlation_id,
            description=f"Investment {trade_type}: {quantity} @ {price}",
            details={
                "type": trade_type,
                "quantity": quantity,
                "price": price,
            },
            is_user_action=True,
        )

    @staticmethod
    def investment_price_updated(
        investment_id: str,
        old_price: str,
        new_price: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_PRICE_UPDATED,
            entity_type="investment",
            entity_id=investment_id,
            correlation_id=correlation_id,
            description=f"Price updated: {old_price} -> {new_price}",
            details={
                "old_price": old_price,
                "new_price": new_price,
            },
            is_user_action=True,
        )

    @staticmethod
    def dashboard_refreshed(
        financial_year: str,
        net_worth: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_REFRESHED,
            severity=AuditSeverity.DEBUG,
            entity_type="dashboard",
            correlation_id=correlation_id,
            description=f"Dashboard refreshed for FY {financial_year}",
            details={
                "financial_year": financial_year,
                "net_worth": net_worth,
            },
        )

    @staticmethod
    def login_succeeded() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="session",
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description="Login attempt failed",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )
