"""Ledger package: transaction store, accounts and the user registry."""

from finance_tracker.ledger.account import Account, compare_balance
from finance_tracker.ledger.registry import UserRegistry
from finance_tracker.ledger.store import RecordsView, TransactionStore

__all__ = [
    "Account",
    "RecordsView",
    "TransactionStore",
    "UserRegistry",
    "compare_balance",
]
