"""
Accounts

An Account is a named owner of exactly one TransactionStore. It is the
surface the front end, the snapshot writer and the reports talk to.

DESIGN DECISION: Accounts are never copied implicitly. Passing an account
around shares it; clone() is the only way to duplicate its history, and
a clone counts as a newly created user.
"""

from decimal import Decimal
from typing import Optional, Union

from finance_tracker.ledger.registry import UserRegistry
from finance_tracker.ledger.store import RecordsView, TransactionStore
from finance_tracker.models.ledger import (
    AppendResult,
    BalanceComparison,
    ComparisonOutcome,
    TransactionKind,
)


class Account:
    """A user's ledger: owner name plus transaction store."""

    def __init__(
        self,
        name: str,
        initial_balance: Optional[Union[Decimal, int, str]] = None,
        registry: Optional[UserRegistry] = None,
        store: Optional[TransactionStore] = None,
    ):
        """
        Create an account.

        Args:
            name: Owner name, fixed for the account's lifetime
            initial_balance: Starting balance when no store is given
            registry: Registry to count this account in, if any
            store: Existing store to adopt (e.g. one rebuilt from a snapshot)
        """
        if not name or not name.strip():
            raise ValueError("Account name must not be empty")
        name = name.strip()
        # Must fit on the snapshot's "User Name:" line
        if not name.isprintable():
            raise ValueError(f"Account name must be a single line of printable text: {name!r}")
        self._name = name
        self._store = store if store is not None else TransactionStore(initial_balance)
        if registry is not None:
            registry.register(self._name)

    def __repr__(self) -> str:
        return f"Account(name={self._name!r}, balance={self.balance}, transactions={len(self._store)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def balance(self) -> Decimal:
        return self._store.current_balance()

    @property
    def store(self) -> TransactionStore:
        return self._store

    def add_transaction(
        self,
        kind: Union[TransactionKind, str],
        amount,
        category: str,
        date: str = "N/A",
        note: str = "",
    ) -> AppendResult:
        """Record a transaction. Failures come back in the result, never raised."""
        return self._store.append(kind, amount, category, date, note)

    def all_records(self) -> RecordsView:
        return self._store.all_records()

    def is_empty(self) -> bool:
        return self._store.is_empty()

    def transaction_count(self) -> int:
        return len(self._store)

    def clone(
        self,
        new_name: Optional[str] = None,
        registry: Optional[UserRegistry] = None,
    ) -> "Account":
        """Duplicate this account's history into a new, independent account."""
        return Account(
            new_name or self._name,
            registry=registry,
            store=self._store.clone(),
        )


def compare_balance(a: Account, b: Account) -> BalanceComparison:
    """
    Compare two accounts' balances without touching either.

    Balances are Decimal, so equality is exact.
    """
    balance_a = a.balance
    balance_b = b.balance
    if balance_a > balance_b:
        outcome = ComparisonOutcome.A_GREATER
    elif balance_a < balance_b:
        outcome = ComparisonOutcome.B_GREATER
    else:
        outcome = ComparisonOutcome.EQUAL

    return BalanceComparison(
        outcome=outcome,
        name_a=a.name,
        name_b=b.name,
        balance_a=balance_a,
        balance_b=balance_b,
    )
