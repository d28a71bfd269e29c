"""
Audit Logger

DESIGN DECISION: Every user-visible ledger action is logged.
This provides:
1. Traceability of accepted and rejected transactions
2. Debugging capability when snapshots fail to save
3. A session history the user can look at

The audit logger:
- Never raises (a failing audit store must not break the ledger)
- Supports correlation IDs to tie together events of one session
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.services.storage import AuditStorageInterface


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend (for the in-app activity view)
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
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def _build_and_log(self, build, **kwargs) -> bool:
        """Build an event and log it; a failing build is logged, not raised."""
        try:
            event = build(**kwargs)
        except Exception as e:
            self._logger.error(
                "audit_event_build_failed",
                builder=build.__name__,
                error=str(e),
            )
            return False
        return self.log(event)

    def log_account_created(
        self,
        account_name: str,
        initial_balance: str,
        total_users: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log account creation."""
        self._build_and_log(
            AuditEventBuilder.account_created,
            account_name=account_name,
            initial_balance=initial_balance,
            total_users=total_users,
            correlation_id=correlation_id,
        )

    def log_account_cloned(
        self,
        source_name: str,
        account_name: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.account_cloned,
            source_name=source_name,
            account_name=account_name,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        )

    def log_transaction_added(
        self,
        account_name: str,
        kind: str,
        amount: str,
        category: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an accepted transaction."""
        self._build_and_log(
            AuditEventBuilder.transaction_added,
            account_name=account_name,
            kind=kind,
            amount=amount,
            category=category,
            balance=balance,
            correlation_id=correlation_id,
        )

    def log_transaction_rejected(
        self,
        account_name: str,
        error_code: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected transaction."""
        self._build_and_log(
            AuditEventBuilder.transaction_rejected,
            account_name=account_name,
            error_code=error_code,
            message=message,
            correlation_id=correlation_id,
        )

    def log_snapshot_saved(
        self,
        account_name: str,
        path: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.snapshot_saved,
            account_name=account_name,
            path=path,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        )

    def log_snapshot_save_failed(
        self,
        account_name: str,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.snapshot_save_failed,
            account_name=account_name,
            path=path,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    def log_snapshot_loaded(
        self,
        account_name: str,
        path: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.snapshot_loaded,
            account_name=account_name,
            path=path,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        )

    def log_balances_compared(
        self,
        name_a: str,
        name_b: str,
        outcome: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.balances_compared,
            name_a=name_a,
            name_b=name_b,
            outcome=outcome,
            correlation_id=correlation_id,
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self._build_and_log(
            AuditEventBuilder.system_error,
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a session and pass it through
    all subsequent operations.
    """
    return uuid4()
