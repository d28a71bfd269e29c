"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Snapshots are written as text files; audit events are kept in memory.
"""

from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    SnapshotFormatError,
    SnapshotStorageInterface,
    StorageError,
)
from finance_tracker.services.storage.memory import InMemoryAuditStorage
from finance_tracker.services.storage.text_file import (
    TextFileSnapshotStorage,
    parse_snapshot,
    render_snapshot,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "NotFoundError",
    "SnapshotFormatError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "TextFileSnapshotStorage",
    "parse_snapshot",
    "render_snapshot",
]
