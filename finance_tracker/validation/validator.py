"""
Transaction Validation

DESIGN DECISION: Raw field values from the front end are validated
before a TransactionRecord is ever constructed. Checks run in a fixed
order:

1. AMOUNT   - must parse as a finite number greater than zero
2. KIND     - must be exactly "income" or "expense"
3. CATEGORY - must be a non-empty label
4. DATE, NOTE - free text, but it must be storable as UTF-8

Every failing check is reported, the first one determines the error code.

IMPORTANT: Validation NEVER silently fixes issues and NEVER raises.
It reports them so the caller can reject the entry and tell the user.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from finance_tracker.models.ledger import (
    LedgerErrorCode,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)


# Longest rendering of a rejected value quoted back in a message
PREVIEW_LENGTH = 40


def _preview(value: Any) -> str:
    try:
        text = repr(value)
    except ValueError:
        # int repr is capped by the interpreter's digit limit
        text = f"<{type(value).__name__}>"
    if len(text) > PREVIEW_LENGTH:
        text = text[:PREVIEW_LENGTH - 3] + "..."
    return text


def _is_storable(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class TransactionValidator:
    """Validates raw transaction fields into a ValidationResult."""

    def _parse_amount(self, amount: Any) -> Optional[Decimal]:
        """Convert an incoming amount to Decimal, or None if it is not a number."""
        if isinstance(amount, bool):
            return None
        if isinstance(amount, (Decimal, int)):
            return Decimal(amount)
        if isinstance(amount, (float, str)):
            try:
                # str() keeps 0.1 as 0.1 instead of the full binary expansion
                return Decimal(str(amount).strip())
            except (InvalidOperation, ValueError):
                return None
        return None

    def _check_amount(self, amount: Any) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        parsed = self._parse_amount(amount)
        if parsed is None or not parsed.is_finite():
            return None, [ValidationIssue(
                field="amount",
                code=LedgerErrorCode.INVALID_AMOUNT,
                message=f"Amount must be a number, got {_preview(amount)}",
            )]
        if parsed <= 0:
            return None, [ValidationIssue(
                field="amount",
                code=LedgerErrorCode.INVALID_AMOUNT,
                message="Amount must be positive!",
            )]
        return parsed, []

    def _check_kind(
        self,
        kind: Union[TransactionKind, str, Any],
    ) -> tuple[Optional[TransactionKind], list[ValidationIssue]]:
        if isinstance(kind, TransactionKind):
            return kind, []
        if isinstance(kind, str):
            try:
                return TransactionKind(kind), []
            except ValueError:
                pass
        return None, [ValidationIssue(
            field="kind",
            code=LedgerErrorCode.INVALID_KIND,
            message="Type must be 'income' or 'expense'!",
        )]

    def _check_category(self, category: Any) -> list[ValidationIssue]:
        if not isinstance(category, str) or not category.strip():
            return [ValidationIssue(
                field="category",
                code=LedgerErrorCode.INVALID_CATEGORY,
                message="Category must not be empty!",
            )]
        if not _is_storable(category):
            return [ValidationIssue(
                field="category",
                code=LedgerErrorCode.INVALID_CATEGORY,
                message="Category contains characters that cannot be stored!",
            )]
        return []

    def _check_text(self, field: str, value: Any) -> list[ValidationIssue]:
        if isinstance(value, str) and _is_storable(value):
            return []
        return [ValidationIssue(
            field=field,
            code=LedgerErrorCode.INVALID_TEXT,
            message=f"{field.capitalize()} contains characters that cannot be stored!",
        )]

    def validate(
        self,
        kind: Union[TransactionKind, str],
        amount: Any,
        category: str,
        date: str = "N/A",
        note: str = "",
    ) -> ValidationResult:
        """
        Run all checks on raw transaction fields.

        Args:
            kind: TransactionKind member or its string value
            amount: Decimal, int, float or numeric string
            category: Category label
            date: Date text
            note: Note text

        Returns:
            ValidationResult; on success it carries the normalized kind and amount
        """
        parsed_amount, issues = self._check_amount(amount)

        parsed_kind, kind_issues = self._check_kind(kind)
        issues.extend(kind_issues)

        issues.extend(self._check_category(category))
        issues.extend(self._check_text("date", date))
        issues.extend(self._check_text("note", note))

        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        return ValidationResult(
            is_valid=True,
            kind=parsed_kind,
            amount=parsed_amount,
        )
