"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the ledger must conform to these schemas.
"""

from finance_tracker.models.ledger import (
    AppendResult,
    BalanceComparison,
    ComparisonOutcome,
    LedgerErrorCode,
    LedgerQuery,
    QueryResult,
    SaveResult,
    TransactionKind,
    TransactionRecord,
    ValidationIssue,
    ValidationResult,
    format_amount,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AppendResult",
    "BalanceComparison",
    "ComparisonOutcome",
    "LedgerErrorCode",
    "LedgerQuery",
    "QueryResult",
    "SaveResult",
    "TransactionKind",
    "TransactionRecord",
    "ValidationIssue",
    "ValidationResult",
    "format_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
