"""
Tests for the Finance Tracker data models

Test strategy:
1. Unit tests for individual components (models, validator, store)
2. Integration tests for flows (session, snapshot files in tmp_path)
3. No files written outside pytest's temporary directories
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from finance_tracker.models.ledger import (
    BalanceComparison,
    ComparisonOutcome,
    LedgerErrorCode,
    LedgerQuery,
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


class TestTransactionRecord:
    """Tests for the TransactionRecord model."""

    def test_record_creation(self):
        """Test TransactionRecord creation with all fields."""
        record = TransactionRecord(
            kind=TransactionKind.INCOME,
            amount=Decimal("1000"),
            category="salary",
            date="01/01/2024",
            note="Monthly salary",
        )
        assert record.kind is TransactionKind.INCOME
        assert record.amount == Decimal("1000")
        assert record.date == "01/01/2024"

    def test_record_defaults(self):
        """Test date and note defaults."""
        record = TransactionRecord(kind="expense", amount=Decimal("5"), category="food")
        assert record.date == "N/A"
        assert record.note == ""

    def test_record_is_immutable(self):
        """Test that a record cannot be modified after construction."""
        record = TransactionRecord(kind="income", amount=Decimal("10"), category="gift")
        with pytest.raises(ValidationError):
            record.amount = Decimal("20")

    def test_record_rejects_unknown_kind(self):
        """Test that kinds outside income/expense are rejected."""
        with pytest.raises(ValidationError):
            TransactionRecord(kind="transfer", amount=Decimal("10"), category="x")

    def test_record_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValidationError):
            TransactionRecord(kind="income", amount=Decimal("0"), category="x")
        with pytest.raises(ValidationError):
            TransactionRecord(kind="income", amount=Decimal("-1"), category="x")

    def test_record_rejects_empty_category(self):
        """Test that category must be non-empty after stripping."""
        with pytest.raises(ValidationError):
            TransactionRecord(kind="income", amount=Decimal("1"), category="   ")

    def test_signed_amount(self):
        """Test that expenses contribute negatively."""
        income = TransactionRecord(kind="income", amount=Decimal("7"), category="x")
        expense = TransactionRecord(kind="expense", amount=Decimal("7"), category="x")
        assert income.signed_amount == Decimal("7")
        assert expense.signed_amount == Decimal("-7")


class TestTransactionKind:
    """Tests for the transaction kind enum."""

    def test_kind_values(self):
        """Test kind string values."""
        assert TransactionKind("income") is TransactionKind.INCOME
        assert TransactionKind("expense") is TransactionKind.EXPENSE

    def test_kind_sign(self):
        assert TransactionKind.INCOME.sign == 1
        assert TransactionKind.EXPENSE.sign == -1


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_error_code_is_first_issue(self):
        """Test error_code reports the first issue found."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    code=LedgerErrorCode.INVALID_AMOUNT,
                    message="Amount must be positive!",
                ),
                ValidationIssue(
                    field="kind",
                    code=LedgerErrorCode.INVALID_KIND,
                    message="Type must be 'income' or 'expense'!",
                ),
            ],
        )
        assert result.error_code is LedgerErrorCode.INVALID_AMOUNT
        assert result.error_count == 2

    def test_valid_result_has_no_error_code(self):
        result = ValidationResult(is_valid=True)
        assert result.error_code is None
        assert result.error_count == 0


class TestBalanceComparison:
    """Tests for BalanceComparison rendering."""

    def test_describe_a_greater(self):
        comparison = BalanceComparison(
            outcome=ComparisonOutcome.A_GREATER,
            name_a="alice",
            name_b="bob",
            balance_a=Decimal("1300"),
            balance_b=Decimal("500"),
        )
        assert comparison.describe() == "alice has more savings: $1300 vs $500"

    def test_describe_b_greater(self):
        comparison = BalanceComparison(
            outcome=ComparisonOutcome.B_GREATER,
            name_a="alice",
            name_b="bob",
            balance_a=Decimal("500"),
            balance_b=Decimal("1300.50"),
        )
        assert comparison.describe() == "bob has more savings: $1300.5 vs $500"

    def test_describe_equal(self):
        comparison = BalanceComparison(
            outcome=ComparisonOutcome.EQUAL,
            name_a="alice",
            name_b="bob",
            balance_a=Decimal("500"),
            balance_b=Decimal("500"),
        )
        assert comparison.describe() == "Both have equal balance: $500"


class TestFormatAmount:
    """Tests for amount rendering."""

    def test_whole_numbers_have_no_exponent(self):
        assert format_amount(Decimal("1800")) == "1800"
        assert format_amount(Decimal("100")) == "100"

    def test_trailing_zeros_are_dropped(self):
        assert format_amount(Decimal("12.50")) == "12.5"

    def test_zero_and_negative(self):
        assert format_amount(Decimal("0.00")) == "0"
        assert format_amount(Decimal("-200")) == "-200"


class TestLedgerQuery:
    """Tests for LedgerQuery constraints."""

    def test_rejects_unknown_query_type(self):
        with pytest.raises(ValidationError):
            LedgerQuery(query_type="delete")

    def test_rejects_unknown_group_by(self):
        with pytest.raises(ValidationError):
            LedgerQuery(query_type="aggregate", group_by="date")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Income recorded",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            account_name="alice",
            description="Snapshot saved",
            details={"path": "alice_finance.txt"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "snapshot_saved"
        assert log_dict["account_name"] == "alice"
        assert log_dict["details"]["path"] == "alice_finance.txt"

    def test_builder_clips_long_user_text(self):
        """Test that a long category cannot overflow the description."""
        event = AuditEventBuilder.transaction_added(
            account_name="alice",
            kind="income",
            amount="5",
            category="c" * 600,
            balance="5",
        )
        assert len(event.description) == 500
        assert event.description.endswith("...")
        assert event.details["category"] == "c" * 600

    def test_builder_transaction_rejected(self):
        """Test AuditEventBuilder.transaction_rejected."""
        correlation_id = uuid4()
        event = AuditEventBuilder.transaction_rejected(
            account_name="alice",
            error_code="invalid_amount",
            message="Amount must be positive!",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.TRANSACTION_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "invalid_amount"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_snapshot_save_failed(self):
        """Test AuditEventBuilder.snapshot_save_failed."""
        event = AuditEventBuilder.snapshot_save_failed(
            account_name="bob",
            path="/nope/bob_finance.txt",
            error_message="Permission denied",
        )
        assert event.event_type == AuditEventType.SNAPSHOT_SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.details["path"] == "/nope/bob_finance.txt"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
