"""
Core Data Models for the Finance Tracker

These models define the schemas for everything flowing through the ledger.
They are designed to:
1. Make the transaction kind a closed set of values
2. Keep recorded transactions immutable
3. Represent validation failures as values rather than exceptions
4. Be serializable for snapshots and logging

DESIGN DECISION: Amounts are Decimal, never float.
Balances compare exactly and render without binary rounding noise.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Direction of a ledger entry.

    Income increases the running balance, expense decreases it.
    """
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def sign(self) -> int:
        return 1 if self is TransactionKind.INCOME else -1


class LedgerErrorCode(str, Enum):
    """
    Error taxonomy for recoverable ledger failures.

    None of these are fatal: the operation is rejected, state is left
    unchanged and the caller decides how to report it.
    """
    INVALID_AMOUNT = "invalid_amount"
    INVALID_KIND = "invalid_kind"
    INVALID_CATEGORY = "invalid_category"
    INVALID_TEXT = "invalid_text"
    IO_ERROR = "io_error"


class ComparisonOutcome(str, Enum):
    """Result of comparing two account balances."""
    A_GREATER = "a_greater"
    B_GREATER = "b_greater"
    EQUAL = "equal"


# =============================================================================
# TRANSACTION RECORD
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A single ledger entry.

    CRITICAL: Records are frozen. Once appended to a store they can be
    shared freely with readers (history views, snapshot writers) without
    copying.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: TransactionKind = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount of the entry"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Free-text category label (e.g. salary, food)"
    )
    date: str = Field(
        default="N/A",
        description="Date as entered by the user, kept opaque"
    )
    note: str = Field(
        default="",
        description="Optional free-text note"
    )

    @field_validator('amount')
    @classmethod
    def amount_must_be_finite(cls, v: Decimal) -> Decimal:
        """Reject NaN and infinities that slip past the comparison check."""
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign it contributes to the balance."""
        return self.amount if self.kind is TransactionKind.INCOME else -self.amount


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    code: LedgerErrorCode = Field(
        ...,
        description="Machine-readable error code"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """
    Result of validating raw transaction fields.

    When valid, `kind` and `amount` hold the normalized values ready
    to build a TransactionRecord.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    kind: Optional[TransactionKind] = None
    amount: Optional[Decimal] = None

    @property
    def error_code(self) -> Optional[LedgerErrorCode]:
        """Code of the first issue, in check order."""
        return self.issues[0].code if self.issues else None

    @property
    def error_count(self) -> int:
        return len(self.issues)


class AppendResult(BaseModel):
    """
    Outcome of appending a transaction to a store.

    Exactly one of `record` (on success) or `error_code` (on failure) is set.
    """

    success: bool
    record: Optional[TransactionRecord] = None
    balance: Decimal = Field(
        ...,
        description="Balance after the operation (unchanged on failure)"
    )
    error_code: Optional[LedgerErrorCode] = None
    message: str = ""
    issues: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def rejected(cls, validation: ValidationResult, balance: Decimal) -> "AppendResult":
        first = validation.issues[0]
        return cls(
            success=False,
            balance=balance,
            error_code=first.code,
            message=first.message,
            issues=validation.issues,
        )


# =============================================================================
# COMPARISON & PERSISTENCE RESULTS
# =============================================================================

class BalanceComparison(BaseModel):
    """Balances of two accounts and which one is greater."""
    model_config = ConfigDict(frozen=True)

    outcome: ComparisonOutcome
    name_a: str
    name_b: str
    balance_a: Decimal
    balance_b: Decimal

    def describe(self) -> str:
        """Human-readable summary of the comparison."""
        if self.outcome is ComparisonOutcome.A_GREATER:
            return (
                f"{self.name_a} has more savings: "
                f"${format_amount(self.balance_a)} vs ${format_amount(self.balance_b)}"
            )
        if self.outcome is ComparisonOutcome.B_GREATER:
            return (
                f"{self.name_b} has more savings: "
                f"${format_amount(self.balance_b)} vs ${format_amount(self.balance_a)}"
            )
        return f"Both have equal balance: ${format_amount(self.balance_a)}"


class SaveResult(BaseModel):
    """Outcome of persisting an account snapshot."""

    success: bool
    path: str
    transaction_count: int = 0
    error_code: Optional[LedgerErrorCode] = None
    error_message: Optional[str] = None
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# =============================================================================
# QUERY MODELS
# =============================================================================

class LedgerQuery(BaseModel):
    """
    A structured query over one account's transactions.

    The query is executed deterministically against the in-memory store.
    """

    query_type: str = Field(
        default="list",
        pattern="^(list|aggregate)$",
        description="Type of query to execute"
    )

    # Filters
    kind_filter: Optional[TransactionKind] = None
    category_filter: Optional[str] = None

    # For aggregations
    aggregation_type: Optional[str] = Field(
        default=None,
        pattern="^(sum|count|average|min|max)$"
    )
    group_by: Optional[str] = Field(
        default=None,
        pattern="^(category|kind)$"
    )

    limit: int = Field(
        default=100,
        ge=1,
        le=10000
    )


class QueryResult(BaseModel):
    """Result of executing a LedgerQuery."""

    success: bool
    error_message: Optional[str] = None

    data_found: bool
    result_count: int = Field(ge=0)

    results: list[dict] = Field(default_factory=list)
    aggregation_result: Optional[dict] = None

    query_description: str


def format_amount(value: Decimal) -> str:
    """
    Render an amount without exponent or trailing zeros.

    Decimal("1800") -> "1800", Decimal("12.50") -> "12.5".
    """
    if value == 0:
        return "0"
    return format(value.normalize(), "f")
