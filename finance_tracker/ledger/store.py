"""
Transaction Store

The in-memory ledger behind every account: an ordered, append-only
sequence of TransactionRecord plus the running balance.

DESIGN DECISION: Records live in a slot buffer with an explicit capacity.
When the buffer is full its capacity doubles, so appends are amortized
O(1) and the growth timing is observable (and logged) for testing.

GUARANTEES:
- balance == initial balance + income - expense over the stored records
- a rejected append changes neither records nor balance
- append never raises; every failure comes back as an AppendResult
- stored records are never modified or removed
"""

import threading
from collections.abc import Iterable, Sequence
from decimal import Decimal, DecimalException
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from finance_tracker.config import get_settings
from finance_tracker.models.ledger import (
    AppendResult,
    LedgerErrorCode,
    TransactionKind,
    TransactionRecord,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.validation import TransactionValidator


logger = structlog.get_logger(__name__)

FIELD_ERROR_CODES = {
    "amount": LedgerErrorCode.INVALID_AMOUNT,
    "kind": LedgerErrorCode.INVALID_KIND,
    "category": LedgerErrorCode.INVALID_CATEGORY,
}


def _issues_from_error(error: ValidationError) -> ValidationResult:
    """Map a record construction failure onto ledger error codes."""
    issues = []
    for detail in error.errors():
        field = str(detail["loc"][0]) if detail["loc"] else "record"
        issues.append(ValidationIssue(
            field=field,
            code=FIELD_ERROR_CODES.get(field, LedgerErrorCode.INVALID_TEXT),
            message=f"{field.capitalize()} is invalid: {detail['msg']}",
        ))
    return ValidationResult(is_valid=False, issues=issues)


class RecordsView(Sequence):
    """
    Read-only view over the records of a store.

    The view is fixed to the records present when it was taken, can be
    iterated any number of times and never copies the records.
    """

    def __init__(self, slots: list, count: int):
        self._slots = slots
        self._count = count

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._slots[i] for i in range(*index.indices(self._count)))
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError("record index out of range")
        return self._slots[index]

    def __iter__(self):
        for i in range(self._count):
            yield self._slots[i]

    def __repr__(self) -> str:
        return f"RecordsView(count={self._count})"


class TransactionStore:
    """
    Owns the records and running balance of one ledger.

    Appends are serialized with a lock; readers use all_records(),
    which returns a snapshot view and never blocks writers.
    """

    GROWTH_FACTOR = 2

    def __init__(
        self,
        initial_balance: Optional[Union[Decimal, int, str]] = None,
        initial_capacity: Optional[int] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        """
        Initialize an empty store.

        Args:
            initial_balance: Starting balance. Defaults to LEDGER_INITIAL_BALANCE.
            initial_capacity: Starting slot capacity. Defaults to LEDGER_INITIAL_CAPACITY.
            validator: Validator for incoming fields.
        """
        settings = get_settings().ledger
        if initial_balance is None:
            initial_balance = settings.initial_balance
        if initial_capacity is None:
            initial_capacity = settings.initial_capacity
        if initial_capacity < 1:
            raise ValueError("initial_capacity must be at least 1")

        self._initial_balance = Decimal(str(initial_balance))
        self._balance = self._initial_balance
        self._capacity = initial_capacity
        self._slots: list[Optional[TransactionRecord]] = [None] * initial_capacity
        self._count = 0
        self._validator = validator or TransactionValidator()
        self._lock = threading.RLock()

    @classmethod
    def from_records(
        cls,
        records: Iterable[TransactionRecord],
        initial_balance: Union[Decimal, int, str] = Decimal("0"),
        initial_capacity: Optional[int] = None,
    ) -> "TransactionStore":
        """
        Build a store from already-validated records.

        Used when loading a snapshot. The balance is recomputed from
        scratch over the loaded records.
        """
        store = cls(initial_balance=initial_balance, initial_capacity=initial_capacity)
        for record in records:
            store._push(record)
        store._balance = store._recompute_balance()
        return store

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    def __len__(self) -> int:
        return self._count

    def _grow(self) -> None:
        """Multiply capacity by GROWTH_FACTOR, keeping every stored record."""
        extra = self._capacity * (self.GROWTH_FACTOR - 1)
        self._slots.extend([None] * extra)
        self._capacity += extra
        logger.info("ledger_storage_grown", capacity=self._capacity, count=self._count)

    def _push(self, record: TransactionRecord) -> None:
        if self._count >= self._capacity:
            self._grow()
        self._slots[self._count] = record
        self._count += 1

    def _recompute_balance(self) -> Decimal:
        total = self._initial_balance
        for i in range(self._count):
            total += self._slots[i].signed_amount
        return total

    def append(
        self,
        kind: Union[TransactionKind, str],
        amount,
        category: str,
        date: str = "N/A",
        note: str = "",
    ) -> AppendResult:
        """
        Validate and append a transaction.

        Args:
            kind: "income"/"expense" or a TransactionKind
            amount: Positive amount (Decimal, int, float or numeric string)
            category: Non-empty category label
            date: Date text, stored as given
            note: Optional note

        Returns:
            AppendResult with the new record and balance, or the error code
        """
        date = "N/A" if date is None else str(date)
        note = "" if note is None else str(note)

        with self._lock:
            validation = self._validator.validate(kind, amount, category, date, note)
            if not validation.is_valid:
                return self._reject(validation)

            try:
                record = TransactionRecord(
                    kind=validation.kind,
                    amount=validation.amount,
                    category=category,
                    date=date,
                    note=note,
                )
            except ValidationError as e:
                return self._reject(_issues_from_error(e))

            try:
                new_balance = self._balance + record.signed_amount
            except DecimalException:
                return self._reject(ValidationResult(
                    is_valid=False,
                    issues=[ValidationIssue(
                        field="amount",
                        code=LedgerErrorCode.INVALID_AMOUNT,
                        message="Amount is too large for the balance!",
                    )],
                ))

            self._push(record)
            self._balance = new_balance

            return AppendResult(
                success=True,
                record=record,
                balance=self._balance,
                message="Transaction Added Successfully!",
            )

    def _reject(self, validation: ValidationResult) -> AppendResult:
        logger.warning(
            "transaction_rejected",
            error_code=validation.error_code.value,
            issues=[issue.message for issue in validation.issues],
        )
        return AppendResult.rejected(validation, self._balance)

    def all_records(self) -> RecordsView:
        """All records in insertion order, as a read-only view."""
        with self._lock:
            return RecordsView(self._slots, self._count)

    def current_balance(self) -> Decimal:
        return self._balance

    def is_empty(self) -> bool:
        return self._count == 0

    def totals(self) -> tuple[Decimal, Decimal]:
        """Return (total income, total expense) over the stored records."""
        income = Decimal("0")
        expense = Decimal("0")
        for record in self.all_records():
            if record.kind is TransactionKind.INCOME:
                income += record.amount
            else:
                expense += record.amount
        return income, expense

    def clone(self) -> "TransactionStore":
        """
        Independent copy of this store.

        Records are immutable and shared; only the slot buffer is copied.
        """
        with self._lock:
            copy = TransactionStore(
                initial_balance=self._initial_balance,
                initial_capacity=self._capacity,
                validator=self._validator,
            )
            copy._slots[:self._count] = self._slots[:self._count]
            copy._count = self._count
            copy._balance = self._balance
            return copy
