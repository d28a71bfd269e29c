"""
Main Orchestrator for the Finance Tracker

This module ties together the ledger, snapshot storage and audit
logging, and defines the flows the front end drives:
1. Create account (register user → audit)
2. Add transaction (validate → append → audit)
3. Save / load snapshot (render → write → verify → audit)
4. Compare balances of two accounts

DESIGN DECISION: The session owns the user registry. There is no
process-wide counter; two sessions count their users independently.
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import get_settings
from finance_tracker.ledger import Account, RecordsView, UserRegistry, compare_balance
from finance_tracker.models.ledger import (
    AppendResult,
    BalanceComparison,
    LedgerQuery,
    QueryResult,
    SaveResult,
    TransactionKind,
    format_amount,
)
from finance_tracker.queries import LedgerQueryExecutor
from finance_tracker.services.storage import (
    InMemoryAuditStorage,
    SnapshotStorageInterface,
    StorageError,
    TextFileSnapshotStorage,
)


SAMPLE_TRANSACTIONS = (
    (TransactionKind.INCOME, Decimal("1000"), "salary", "01/01/2024", "Monthly salary"),
    (TransactionKind.EXPENSE, Decimal("200"), "food", "02/01/2024", "Groceries"),
)


class LedgerSession:
    """
    One user session: the accounts created in it and their shared services.

    Flow:
    1. create_account → Account registered with this session's registry
    2. add_transaction → AppendResult (never raises on bad input)
    3. save / load → snapshot storage
    4. compare → BalanceComparison
    """

    def __init__(
        self,
        snapshot_storage: Optional[SnapshotStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        registry: Optional[UserRegistry] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self._snapshot_storage = snapshot_storage or TextFileSnapshotStorage()
        self._audit_logger = audit_logger or AuditLogger(InMemoryAuditStorage())
        self._registry = registry or UserRegistry()
        self._correlation_id = correlation_id or create_correlation_id()

    @property
    def registry(self) -> UserRegistry:
        return self._registry

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def snapshot_storage(self) -> SnapshotStorageInterface:
        return self._snapshot_storage

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    def create_account(
        self,
        name: str,
        initial_balance: Optional[Union[Decimal, int, str]] = None,
    ) -> Account:
        """Create and register a new account."""
        account = Account(name, initial_balance=initial_balance, registry=self._registry)
        self._audit_logger.log_account_created(
            account_name=account.name,
            initial_balance=format_amount(account.balance),
            total_users=self._registry.total_users(),
            correlation_id=self._correlation_id,
        )
        return account

    def clone_account(self, account: Account, new_name: Optional[str] = None) -> Account:
        """Explicitly duplicate an account; the copy counts as a new user."""
        copy = account.clone(new_name=new_name, registry=self._registry)
        self._audit_logger.log_account_cloned(
            source_name=account.name,
            account_name=copy.name,
            transaction_count=copy.transaction_count(),
            correlation_id=self._correlation_id,
        )
        return copy

    def add_transaction(
        self,
        account: Account,
        kind: Union[TransactionKind, str],
        amount,
        category: str,
        date: str = "N/A",
        note: str = "",
    ) -> AppendResult:
        """Add a transaction and audit the outcome."""
        result = account.add_transaction(kind, amount, category, date, note)
        if result.success:
            self._audit_logger.log_transaction_added(
                account_name=account.name,
                kind=result.record.kind.value,
                amount=format_amount(result.record.amount),
                category=result.record.category,
                balance=format_amount(result.balance),
                correlation_id=self._correlation_id,
            )
        else:
            self._audit_logger.log_transaction_rejected(
                account_name=account.name,
                error_code=result.error_code.value,
                message=result.message,
                correlation_id=self._correlation_id,
            )
        return result

    def create_sample_account(
        self,
        name: str,
        initial_balance: Optional[Union[Decimal, int, str]] = None,
    ) -> Account:
        """
        Create an account pre-filled with a salary and a grocery entry.

        Used to demo balance comparison against a second user.
        """
        if initial_balance is None:
            initial_balance = get_settings().app.secondary_initial_balance
        account = self.create_account(name, initial_balance)
        for kind, amount, category, date, note in SAMPLE_TRANSACTIONS:
            self.add_transaction(account, kind, amount, category, date, note)
        return account

    def history(self, account: Account) -> RecordsView:
        return account.all_records()

    def query(self, account: Account, query: LedgerQuery) -> QueryResult:
        return LedgerQueryExecutor(account).execute(query)

    def compare(self, a: Account, b: Account) -> BalanceComparison:
        comparison = compare_balance(a, b)
        self._audit_logger.log_balances_compared(
            name_a=a.name,
            name_b=b.name,
            outcome=comparison.outcome.value,
            correlation_id=self._correlation_id,
        )
        return comparison

    def save(self, account: Account) -> SaveResult:
        """Write the account's snapshot. Failures are returned, not raised."""
        result = self._snapshot_storage.save_snapshot(account)
        if result.success:
            self._audit_logger.log_snapshot_saved(
                account_name=account.name,
                path=result.path,
                transaction_count=result.transaction_count,
                correlation_id=self._correlation_id,
            )
        else:
            self._audit_logger.log_snapshot_save_failed(
                account_name=account.name,
                path=result.path,
                error_message=result.error_message or "unknown error",
                correlation_id=self._correlation_id,
            )
        return result

    def load(self, name: str) -> Account:
        """
        Restore an account from its snapshot.

        Raises:
            NotFoundError: If no snapshot exists for the name
            SnapshotFormatError: If the snapshot is malformed

        Failures are audited as system errors before they propagate.
        """
        try:
            account = self._snapshot_storage.load_snapshot(name, registry=self._registry)
        except StorageError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"account_name": name},
                correlation_id=self._correlation_id,
            )
            raise
        self._audit_logger.log_snapshot_loaded(
            account_name=account.name,
            path=str(self._snapshot_storage.snapshot_path(name)),
            transaction_count=account.transaction_count(),
            correlation_id=self._correlation_id,
        )
        return account

    def total_users(self) -> int:
        return self._registry.total_users()
