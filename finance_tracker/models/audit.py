"""
Audit Models for the Finance Tracker

Every user-visible action on a ledger is logged for audit purposes.
This provides:
1. A trail of accepted and rejected transactions
2. Debugging information when a save fails
3. A record of which accounts were created in a session

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


DESCRIPTION_MAX_LENGTH = 500


def _clip(text: str, limit: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Shorten user-supplied text so it fits a description field."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_CLONED = "account_cloned"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Snapshots
    SNAPSHOT_SAVED = "snapshot_saved"
    SNAPSHOT_SAVE_FAILED = "snapshot_save_failed"
    SNAPSHOT_LOADED = "snapshot_loaded"

    # Reporting
    BALANCES_COMPARED = "balances_compared"

    # System events
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

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
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

    # Which account this is about
    account_name: Optional[str] = Field(
        default=None,
        description="Owner name of the account involved"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one session)"
    )

    description: str = Field(
        ...,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
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
            "account_name": self.account_name,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created("alice", Decimal("1000"), 1)
        event = AuditEventBuilder.transaction_added("alice", record, balance)
    """

    @staticmethod
    def account_created(
        account_name: str,
        initial_balance: str,
        total_users: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Account created for {account_name}"),
            details={
                "initial_balance": initial_balance,
                "total_users": total_users,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_cloned(
        source_name: str,
        account_name: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CLONED,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Account {account_name} cloned from {source_name}"),
            details={
                "source": source_name,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def transaction_added(
        account_name: str,
        kind: str,
        amount: str,
        category: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"{kind.capitalize()} of {amount} recorded under {category}"),
            details={
                "kind": kind,
                "amount": amount,
                "category": category,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        account_name: str,
        error_code: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Transaction rejected: {message}"),
            error_code=error_code,
            error_message=message,
            is_user_action=True,
        )

    @staticmethod
    def snapshot_saved(
        account_name: str,
        path: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Snapshot saved to {path}"),
            details={
                "path": path,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def snapshot_save_failed(
        account_name: str,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Could not save snapshot to {path}"),
            error_code="io_error",
            error_message=error_message,
            details={"path": path},
        )

    @staticmethod
    def snapshot_loaded(
        account_name: str,
        path: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            account_name=account_name,
            correlation_id=correlation_id,
            description=_clip(f"Snapshot loaded from {path}"),
            details={
                "path": path,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def balances_compared(
        name_a: str,
        name_b: str,
        outcome: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCES_COMPARED,
            correlation_id=correlation_id,
            description=_clip(f"Compared balances of {name_a} and {name_b}"),
            details={
                "name_a": name_a,
                "name_b": name_b,
                "outcome": outcome,
            },
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
            description=_clip(f"System error: {error_type}"),
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
