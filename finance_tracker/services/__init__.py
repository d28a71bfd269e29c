"""Services package."""

from finance_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    NotFoundError,
    SnapshotFormatError,
    SnapshotStorageInterface,
    StorageError,
    TextFileSnapshotStorage,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "NotFoundError",
    "SnapshotFormatError",
    "SnapshotStorageInterface",
    "StorageError",
    "TextFileSnapshotStorage",
]
