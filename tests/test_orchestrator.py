"""
Tests for LedgerSession, the audit logger and ledger queries.

The session is wired with snapshot storage in tmp_path and an
in-memory audit store, so every flow can be checked end to end.
"""

import pytest
from decimal import Decimal

from finance_tracker.audit import AuditLogger
from finance_tracker.ledger import Account
from finance_tracker.models.audit import AuditEvent, AuditEventType
from finance_tracker.models.ledger import (
    ComparisonOutcome,
    LedgerErrorCode,
    LedgerQuery,
    TransactionKind,
)
from finance_tracker.orchestrator import LedgerSession
from finance_tracker.queries import LedgerQueryExecutor
from finance_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    NotFoundError,
    TextFileSnapshotStorage,
)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def session(tmp_path, audit_storage):
    return LedgerSession(
        snapshot_storage=TextFileSnapshotStorage(
            directory=str(tmp_path),
            retry_attempts=1,
            retry_wait_seconds=0,
        ),
        audit_logger=AuditLogger(audit_storage),
    )


def _event_types(storage):
    return [e.event_type for e in reversed(storage.get_recent_events(limit=1000))]


class TestLedgerSession:
    """Tests for the session flows."""

    def test_create_account_registers_and_audits(self, session, audit_storage):
        account = session.create_account("alice", 1000)
        assert account.balance == Decimal("1000")
        assert session.total_users() == 1
        assert _event_types(audit_storage) == [AuditEventType.ACCOUNT_CREATED]

        event = audit_storage.get_events_by_account("alice")[0]
        assert event.details["initial_balance"] == "1000"
        assert event.correlation_id == session.correlation_id

    def test_add_transaction_audits_outcome(self, session, audit_storage):
        account = session.create_account("alice", 1000)
        ok = session.add_transaction(account, "income", 1000, "salary", "01/01/2024", "Monthly salary")
        bad = session.add_transaction(account, "expense", -5, "food")

        assert ok.success and not bad.success
        assert bad.error_code is LedgerErrorCode.INVALID_AMOUNT
        assert account.balance == Decimal("2000")
        assert _event_types(audit_storage) == [
            AuditEventType.ACCOUNT_CREATED,
            AuditEventType.TRANSACTION_ADDED,
            AuditEventType.TRANSACTION_REJECTED,
        ]
        rejected = audit_storage.get_recent_events(limit=1)[0]
        assert rejected.error_code == "invalid_amount"

    def test_sample_account_and_comparison(self, session):
        """Test the create-another-user flow."""
        user = session.create_account("alice", 1000)
        other = session.create_sample_account("bob", 500)

        assert other.balance == Decimal("1300")
        assert [r.category for r in session.history(other)] == ["salary", "food"]

        comparison = session.compare(user, other)
        assert comparison.outcome is ComparisonOutcome.B_GREATER
        assert comparison.describe() == "bob has more savings: $1300 vs $1000"
        assert session.total_users() == 2

    def test_clone_account_counts_user(self, session, audit_storage):
        account = session.create_account("alice", 10)
        session.add_transaction(account, TransactionKind.INCOME, 5, "gift")
        copy = session.clone_account(account, "alice-2")

        assert copy.balance == Decimal("15")
        assert session.total_users() == 2
        assert AuditEventType.ACCOUNT_CLONED in _event_types(audit_storage)

    def test_save_and_load(self, session, tmp_path, audit_storage):
        account = session.create_account("alice", 1000)
        session.add_transaction(account, "expense", 200, "food", "02/01/2024", "Groceries")

        result = session.save(account)
        assert result.success
        assert (tmp_path / "alice_finance.txt").exists()

        restored = session.load("alice")
        assert restored.balance == Decimal("800")
        assert restored.transaction_count() == 1
        assert session.total_users() == 2
        assert _event_types(audit_storage)[-2:] == [
            AuditEventType.SNAPSHOT_SAVED,
            AuditEventType.SNAPSHOT_LOADED,
        ]

    def test_failed_save_is_audited(self, session, tmp_path, audit_storage):
        account = session.create_account("alice", 1000)
        (tmp_path / "alice_finance.txt").mkdir()

        result = session.save(account)
        assert result.success is False
        assert result.error_code is LedgerErrorCode.IO_ERROR
        assert _event_types(audit_storage)[-1] == AuditEventType.SNAPSHOT_SAVE_FAILED

    def test_long_category_is_recorded_and_audited(self, session, audit_storage):
        """Test a long free-text category neither fails nor skips the audit."""
        account = session.create_account("alice", 0)
        result = session.add_transaction(account, "income", 5, "c" * 600)

        assert result.success
        assert account.balance == Decimal("5")
        assert account.all_records()[0].category == "c" * 600
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert len(event.description) <= 500

    def test_long_rejected_amount_is_audited(self, session, audit_storage):
        account = session.create_account("alice", 0)
        result = session.add_transaction(account, "income", "x" * 600, "food")

        assert result.error_code is LedgerErrorCode.INVALID_AMOUNT
        assert account.is_empty()
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.TRANSACTION_REJECTED

    def test_overflowing_amount_is_rejected(self, session):
        account = session.create_account("alice", 0)
        assert session.add_transaction(account, "income", Decimal("9e999999"), "salary").success
        result = session.add_transaction(account, "income", Decimal("9e999999"), "salary")

        assert result.error_code is LedgerErrorCode.INVALID_AMOUNT
        assert account.transaction_count() == 1
        assert account.balance == Decimal("9e999999")

    def test_unencodable_note_is_rejected(self, session, audit_storage):
        account = session.create_account("alice", 0)
        result = session.add_transaction(account, "income", 5, "salary", "d", "\ud800")

        assert result.error_code is LedgerErrorCode.INVALID_TEXT
        assert account.is_empty()
        assert _event_types(audit_storage)[-1] == AuditEventType.TRANSACTION_REJECTED

    def test_invalid_account_name(self, session):
        with pytest.raises(ValueError):
            session.create_account("alice\nbob", 0)
        assert session.total_users() == 0

    def test_failed_load_is_audited(self, session, audit_storage):
        with pytest.raises(NotFoundError):
            session.load("ghost")
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details == {"account_name": "ghost"}
        assert "ghost" in event.error_message

    def test_load_missing_raises(self, session):
        with pytest.raises(NotFoundError):
            session.load("ghost")


class _BrokenAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise RuntimeError("storage down")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_events_by_account(self, account_name):
        return []

    def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for the audit logger."""

    def test_logs_to_storage(self, audit_storage):
        logger = AuditLogger(audit_storage)
        event = AuditEvent(event_type=AuditEventType.SYSTEM_ERROR, description="boom")
        assert logger.log(event) is True
        assert audit_storage.get_recent_events() == [event]

    def test_local_only(self):
        logger = AuditLogger()
        event = AuditEvent(event_type=AuditEventType.ACCOUNT_CREATED, description="hi")
        assert logger.log(event) is True

    def test_storage_failure_does_not_raise(self):
        logger = AuditLogger(_BrokenAuditStorage())
        event = AuditEvent(event_type=AuditEventType.ACCOUNT_CREATED, description="hi")
        assert logger.log(event) is False

    def test_failed_event_build_does_not_raise(self, audit_storage):
        """Test an event that cannot be built is dropped, not raised."""
        logger = AuditLogger(audit_storage)
        logger.log_transaction_added(
            account_name="alice",
            kind="income",
            amount="5",
            category="salary",
            balance="5",
            correlation_id="not-a-uuid",
        )
        assert len(audit_storage) == 0

    def test_log_error(self, audit_storage):
        AuditLogger(audit_storage).log_error("io", "disk full", details={"path": "x"})
        event = audit_storage.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_message == "disk full"


class TestLedgerQueryExecutor:
    """Tests for aggregate and list queries."""

    @pytest.fixture
    def account(self):
        account = Account("alice", initial_balance=0)
        account.add_transaction("income", 1000, "salary")
        account.add_transaction("expense", 200, "food")
        account.add_transaction("expense", 50, "Food")
        account.add_transaction("expense", 300, "rent")
        return account

    def test_list_all(self, account):
        result = LedgerQueryExecutor(account).execute(LedgerQuery())
        assert result.success
        assert result.result_count == 4
        assert result.results[0] == {
            "kind": "income",
            "amount": "1000",
            "category": "salary",
            "date": "N/A",
            "note": "",
        }

    def test_list_filtered_and_limited(self, account):
        query = LedgerQuery(kind_filter=TransactionKind.EXPENSE, limit=2)
        result = LedgerQueryExecutor(account).execute(query)
        assert [r["category"] for r in result.results] == ["food", "Food"]

    def test_category_filter_ignores_case(self, account):
        query = LedgerQuery(category_filter="FOOD")
        result = LedgerQueryExecutor(account).execute(query)
        assert result.result_count == 2

    def test_sum_by_kind(self, account):
        query = LedgerQuery(query_type="aggregate", aggregation_type="sum", group_by="kind")
        result = LedgerQueryExecutor(account).execute(query)
        assert result.aggregation_result["total_amount"] == Decimal("1550")
        assert result.aggregation_result["breakdown"] == {
            "income": Decimal("1000"),
            "expense": Decimal("550"),
        }

    def test_expense_average_and_max(self, account):
        executor = LedgerQueryExecutor(account)
        average = executor.execute(LedgerQuery(
            query_type="aggregate",
            aggregation_type="average",
            kind_filter=TransactionKind.EXPENSE,
        ))
        maximum = executor.execute(LedgerQuery(
            query_type="aggregate",
            aggregation_type="max",
            kind_filter=TransactionKind.EXPENSE,
        ))
        assert average.aggregation_result["average_amount"] == Decimal("550") / 3
        assert maximum.aggregation_result["maximum_amount"] == Decimal("300")

    def test_no_data(self):
        result = LedgerQueryExecutor(Account("empty", initial_balance=0)).execute(
            LedgerQuery(query_type="aggregate")
        )
        assert result.success
        assert result.data_found is False
        assert result.result_count == 0
