"""
Audit Logger

Every significant action in the system is logged.

The audit logger:
- Is async to fit the event flow
- Gracefully handles failures (a failed audit write never breaks a dialog)
- Supports correlation IDs to trace all events of one dialog
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from gold_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from gold_ledger.services.storage import AuditStorageInterface


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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("gold_ledger.audit")

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
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def recent_events(self, limit: int = 50) -> list[dict]:
        """Most recent persisted events, newest first (empty without storage)."""
        if not self._storage:
            return []
        return await self._storage.get_recent_events(limit)

    async def log_identity_registered(self, identity: str, display_name: str) -> None:
        await self.log(AuditEventBuilder.identity_registered(identity, display_name))

    async def log_admin_notified(self, identity: str, admin_identity: str) -> None:
        await self.log(AuditEventBuilder.admin_notified(identity, admin_identity))

    async def log_session_started(
        self,
        identity: str,
        direction: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.session_started(identity, direction, correlation_id))

    async def log_session_abandoned(
        self,
        identity: str,
        step: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.session_abandoned(identity, step, reason, correlation_id)
        )

    async def log_answer_accepted(
        self,
        identity: str,
        step: str,
        next_step: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.answer_accepted(identity, step, next_step, correlation_id)
        )

    async def log_answer_rejected(
        self,
        identity: str,
        step: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.answer_rejected(identity, step, reason, correlation_id)
        )

    async def log_transaction_saved(
        self,
        identity: str,
        record_id: UUID,
        direction: str,
        item_kind: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.transaction_saved(
                identity=identity,
                record_id=record_id,
                direction=direction,
                item_kind=item_kind,
                amount=amount,
                correlation_id=correlation_id,
            )
        )

    async def log_save_failed(
        self,
        identity: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.save_failed(identity, error_message, correlation_id))

    async def log_invoice_rendered(
        self,
        identity: str,
        record_id: UUID,
        path: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.invoice_rendered(identity, record_id, path, correlation_id)
        )

    async def log_summary_presented(self, identity: str, count: int) -> None:
        await self.log(AuditEventBuilder.summary_presented(identity, count))

    async def log_export_generated(
        self,
        identity: str,
        export_format: str,
        path: str,
        count: int,
    ) -> None:
        await self.log(
            AuditEventBuilder.export_generated(identity, export_format, path, count)
        )

    async def log_export_rejected(self, identity: str, export_format: str) -> None:
        await self.log(AuditEventBuilder.export_rejected(identity, export_format))

    async def log_delivery_failed(self, identity: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.delivery_failed(identity, error_message))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        identity: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(
            AuditEventBuilder.system_error(
                error_type=error_type,
                error_message=error_message,
                identity=identity,
                details=details,
                correlation_id=correlation_id,
            )
        )

