"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger decoupled from how snapshots are written
2. Use in-memory storage for testing
3. Swap the text snapshot for another format later

The interface is intentionally simple. Just the operations we need
to save and restore one account at a time.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from uuid import UUID

from finance_tracker.ledger import Account, UserRegistry
from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.ledger import SaveResult


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for account snapshot storage.

    A snapshot is a complete, human-readable picture of one account.
    Saving overwrites the previous snapshot for the same user name.
    """

    @abstractmethod
    def snapshot_path(self, account_name: str) -> Path:
        """
        Location of the snapshot for a user name.

        Args:
            account_name: Owner name of the account

        Returns:
            Path the snapshot is (or would be) written to
        """
        pass

    @abstractmethod
    def save_snapshot(self, account: Account) -> SaveResult:
        """
        Persist a snapshot of the account.

        Args:
            account: The account to save

        Returns:
            SaveResult. Write failures are reported here, never raised.
        """
        pass

    @abstractmethod
    def load_snapshot(
        self,
        account_name: str,
        registry: Optional[UserRegistry] = None,
    ) -> Account:
        """
        Rebuild an account from its snapshot.

        Args:
            account_name: Owner name of the account
            registry: Registry to count the restored account in

        Returns:
            The restored account

        Raises:
            NotFoundError: If no snapshot exists for the name
            SnapshotFormatError: If the snapshot cannot be parsed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one session).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_account(self, account_name: str) -> list[AuditEvent]:
        """
        Get all events for one account.

        Args:
            account_name: Owner name of the account

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class SnapshotFormatError(StorageError):
    """Snapshot content does not match the expected layout."""
    pass
