"""
Tests for the audit logger.
"""

import asyncio
import pytest
from decimal import Decimal

from src.audit import AuditLogger, create_correlation_id
from src.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from src.services.storage import InMemoryAuditStorage


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_events_are_persisted(self):
        storage = InMemoryAuditStorage()
        audit_logger = AuditLogger(storage)
        cid = create_correlation_id()

        async def run():
            await audit_logger.log_transaction_recorded(
                transaction_id="abc",
                description="Rent",
                amount=Decimal("15000"),
                entry_count=2,
                correlation_id=cid,
            )
            await audit_logger.log_balance_refreshed(
                account_id="1001",
                old_balance=Decimal("20000"),
                new_balance=Decimal("5000"),
                correlation_id=cid,
            )
            return await storage.get_events_by_correlation_id(cid)

        events = asyncio.run(run())

        assert [e.event_type for e in events] == [
            AuditEventType.TRANSACTION_RECORDED,
            AuditEventType.ACCOUNT_BALANCE_REFRESHED,
        ]
        assert events[1].details["new_balance"] == "5000"

    def test_without_storage_only_logs_locally(self):
        audit_logger = AuditLogger()
        assert asyncio.run(audit_logger.log(AuditEventBuilder.login_succeeded())) is True

    def test_storage_failure_is_swallowed(self):
        class BrokenStorage(InMemoryAuditStorage):
            async def append_event(self, event):
                raise RuntimeError("disk full")

        audit_logger = AuditLogger(BrokenStorage())
        event = AuditEventBuilder.login_failed("invalid_password")
        assert asyncio.run(audit_logger.log(event)) is False

    def test_error_events_have_error_severity(self):
        storage = InMemoryAuditStorage()
        audit_logger = AuditLogger(storage)
        asyncio.run(audit_logger.log_storage_error("append", "timeout"))
        assert storage.events[0].event_type == AuditEventType.STORAGE_ERROR
        assert storage.events[0].severity == AuditSeverity.ERROR

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
