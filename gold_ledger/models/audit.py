"""
Audit Models for Gold Ledger

Every significant action in the system is logged for audit purposes:
registrations, dialog progress, saved transactions, rendered artifacts
and failures. Audit logs are append-only.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity directory
    IDENTITY_REGISTERED = "identity_registered"
    ADMIN_NOTIFIED = "admin_notified"

    # Dialog
    SESSION_STARTED = "session_started"
    SESSION_ABANDONED = "session_abandoned"
    ANSWER_ACCEPTED = "answer_accepted"
    ANSWER_REJECTED = "answer_rejected"

    # Persistence
    TRANSACTION_SAVED = "transaction_saved"
    SAVE_FAILED = "save_failed"

    # Artifacts
    INVOICE_RENDERED = "invoice_rendered"
    SUMMARY_PRESENTED = "summary_presented"
    EXPORT_GENERATED = "export_generated"
    EXPORT_REJECTED = "export_rejected"

    # System events
    DELIVERY_FAILED = "delivery_failed"
    SYSTEM_ERROR = "system_error"


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
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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

    # Context
    identity: Optional[str] = Field(
        default=None,
        description="Identity (chat id) the event relates to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'session', 'export')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one dialog)"
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
            "identity": self.identity,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """One line of the JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False, default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.session_started(identity, "buy", correlation_id)
        event = AuditEventBuilder.transaction_saved(identity, record_id, ...)
    """

    @staticmethod
    def identity_registered(identity: str, display_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_REGISTERED,
            identity=identity,
            entity_type="identity",
            description=f"New identity registered: {display_name}",
            details={"display_name": display_name},
            is_user_action=True,
        )

    @staticmethod
    def admin_notified(identity: str, admin_identity: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADMIN_NOTIFIED,
            identity=identity,
            entity_type="identity",
            description="Administrator notified about new identity",
            details={"admin_identity": admin_identity},
        )

    @staticmethod
    def session_started(
        identity: str,
        direction: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_STARTED,
            identity=identity,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Transaction dialog started ({direction})",
            details={"direction": direction},
            is_user_action=True,
        )

    @staticmethod
    def session_abandoned(
        identity: str,
        step: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_ABANDONED,
            severity=AuditSeverity.WARNING,
            identity=identity,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Dialog abandoned at {step}",
            details={"step": step, "reason": reason},
        )

    @staticmethod
    def answer_accepted(
        identity: str,
        step: str,
        next_step: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANSWER_ACCEPTED,
            severity=AuditSeverity.DEBUG,
            identity=identity,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Answer accepted at {step}",
            details={"step": step, "next_step": next_step},
            is_user_action=True,
        )

    @staticmethod
    def answer_rejected(
        identity: str,
        step: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANSWER_REJECTED,
            severity=AuditSeverity.WARNING,
            identity=identity,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Answer rejected at {step}",
            details={"step": step, "reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def transaction_saved(
        identity: str,
        record_id: UUID,
        direction: str,
        item_kind: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            identity=identity,
            entity_type="transaction",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Transaction saved: {direction} {item_kind} {amount}",
            details={
                "direction": direction,
                "item_kind": item_kind,
                "total_amount": amount,
            },
        )

    @staticmethod
    def save_failed(
        identity: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            identity=identity,
            entity_type="transaction",
            correlation_id=correlation_id,
            description="Failed to persist transaction",
            error_message=error_message,
        )

    @staticmethod
    def invoice_rendered(
        identity: str,
        record_id: UUID,
        path: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_RENDERED,
            identity=identity,
            entity_type="transaction",
            entity_id=record_id,
            correlation_id=correlation_id,
            description="Invoice image rendered",
            details={"path": path},
        )

    @staticmethod
    def summary_presented(identity: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_PRESENTED,
            identity=identity,
            entity_type="history",
            description=f"Summary over {count} transactions presented",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def export_generated(
        identity: str,
        export_format: str,
        path: str,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            identity=identity,
            entity_type="export",
            description=f"{export_format.upper()} export generated",
            details={"format": export_format, "path": path, "count": count},
            is_user_action=True,
        )

    @staticmethod
    def export_rejected(identity: str, export_format: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_REJECTED,
            identity=identity,
            entity_type="export",
            description=f"{export_format.upper()} export requested with empty history",
            details={"format": export_format},
            is_user_action=True,
        )

    @staticmethod
    def delivery_failed(identity: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELIVERY_FAILED,
            severity=AuditSeverity.ERROR,
            identity=identity,
            description="Outgoing message could not be delivered",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        identity: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            identity=identity,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
