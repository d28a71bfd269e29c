"""Query execution package."""

from finance_tracker.queries.executor import LedgerQueryExecutor

__all__ = ["LedgerQueryExecutor"]
