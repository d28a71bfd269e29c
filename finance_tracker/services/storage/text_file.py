"""
Text File Snapshot Storage

DESIGN DECISION: Snapshots are plain text files, one per user name,
so a user can open their history in any editor. Each save replaces
the previous file in one step; a failed save leaves the old file intact.

Layout:

    ---- Personal Finance Tracker ----
    User Name: <name>
    Balance: <balance>
    Total Transactions: <count>
    ===================================

    Transaction <i>:
    Type: <kind>
    Amount: <amount>
    Category: <category>
    Date: <date>
    Note: <note>
    -----------------------------

TRADEOFFS:
- Notes are single-line; a newline inside a note is written as a space
- The initial balance is not stored, it is derived on load from the
  balance and the recorded amounts
"""

import os
import tempfile
from decimal import Decimal, DecimalException, InvalidOperation
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import get_settings
from finance_tracker.ledger import Account, TransactionStore, UserRegistry
from finance_tracker.models.ledger import (
    LedgerErrorCode,
    SaveResult,
    TransactionKind,
    TransactionRecord,
    format_amount,
)
from finance_tracker.services.storage.interface import (
    NotFoundError,
    SnapshotFormatError,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

HEADER = "---- Personal Finance Tracker ----"
HEADER_RULE = "==================================="
RECORD_RULE = "-----------------------------"
RECORD_FIELDS = ("Type", "Amount", "Category", "Date", "Note")


def _single_line(value: str) -> str:
    return " ".join(value.splitlines())


def render_snapshot(account: Account) -> str:
    """Render the full text snapshot of an account."""
    records = account.all_records()
    lines = [
        HEADER,
        f"User Name: {account.name}",
        f"Balance: {format_amount(account.balance)}",
        f"Total Transactions: {len(records)}",
        HEADER_RULE,
    ]
    for i, record in enumerate(records, start=1):
        lines.extend([
            "",
            f"Transaction {i}:",
            f"Type: {record.kind.value}",
            f"Amount: {format_amount(record.amount)}",
            f"Category: {_single_line(record.category)}",
            f"Date: {_single_line(record.date)}",
            f"Note: {_single_line(record.note)}",
            RECORD_RULE,
        ])
    return "\n".join(lines) + "\n"


def _field(line: str, label: str) -> str:
    prefix = f"{label}:"
    if not line.startswith(prefix):
        raise SnapshotFormatError(f"Expected '{prefix}' but found {line!r}")
    return line[len(prefix):].strip()


def _decimal(value: str, label: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        raise SnapshotFormatError(f"{label} is not a number: {value!r}")
    if not parsed.is_finite():
        raise SnapshotFormatError(f"{label} is not a number: {value!r}")
    return parsed


def parse_snapshot(text: str) -> tuple[str, Decimal, list[TransactionRecord]]:
    """
    Parse snapshot text.

    Returns:
        (user name, balance, records in file order)

    Raises:
        SnapshotFormatError: If the text does not follow the snapshot layout
    """
    lines = text.splitlines()
    if len(lines) < 5 or lines[0] != HEADER or lines[4] != HEADER_RULE:
        raise SnapshotFormatError("Missing snapshot header")

    name = _field(lines[1], "User Name")
    balance = _decimal(_field(lines[2], "Balance"), "Balance")
    try:
        expected = int(_field(lines[3], "Total Transactions"))
    except ValueError:
        raise SnapshotFormatError("Total Transactions is not an integer")

    body = [line for line in lines[5:] if line.strip()]
    block = 2 + len(RECORD_FIELDS)
    if len(body) != expected * block:
        raise SnapshotFormatError(
            f"Expected {expected} transactions but the body has {len(body)} lines"
        )

    records = []
    for i in range(expected):
        chunk = body[i * block:(i + 1) * block]
        if chunk[0] != f"Transaction {i + 1}:" or chunk[-1] != RECORD_RULE:
            raise SnapshotFormatError(f"Malformed block for transaction {i + 1}")
        kind, amount, category, date, note = (
            _field(line, label) for line, label in zip(chunk[1:-1], RECORD_FIELDS)
        )
        try:
            records.append(TransactionRecord(
                kind=TransactionKind(kind),
                amount=_decimal(amount, "Amount"),
                category=category,
                date=date,
                note=note,
            ))
        except (ValueError, ValidationError) as e:
            raise SnapshotFormatError(f"Invalid transaction {i + 1}: {e}")

    return name, balance, records


class TextFileSnapshotStorage(SnapshotStorageInterface):
    """
    Stores one text snapshot per user name in a directory.

    Writes are retried on OSError and verified by reading the file back.
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        suffix: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_seconds: Optional[float] = None,
    ):
        settings = get_settings().ledger
        self._directory = Path(directory if directory is not None else settings.snapshot_dir)
        self._suffix = suffix if suffix is not None else settings.snapshot_suffix
        self._retry_attempts = retry_attempts or settings.write_retry_attempts
        self._retry_wait = (
            retry_wait_seconds
            if retry_wait_seconds is not None
            else settings.write_retry_wait_seconds
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def snapshot_path(self, account_name: str) -> Path:
        file_name = f"{account_name}{self._suffix}"
        if Path(file_name).name != file_name or account_name in ("", ".", ".."):
            raise StorageError(f"User name cannot be used as a file name: {account_name!r}")
        return self._directory / file_name

    def _write(self, path: Path, content: str) -> None:
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_wait, max=10),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                path.parent.mkdir(parents=True, exist_ok=True)
                self._replace(path, content)

    def _replace(self, path: Path, content: str) -> None:
        """
        Write content beside the target, then swap it into place.

        The previous snapshot stays intact until the new one is complete.
        """
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _verify(self, path: Path, content: str) -> bool:
        """Check the file exists and starts with what we wrote."""
        if not path.is_file():
            return False
        with open(path, "r", encoding="utf-8") as f:
            head = f.read(len(content))
        return head == content

    def save_snapshot(self, account: Account) -> SaveResult:
        try:
            path = self.snapshot_path(account.name)
        except StorageError as e:
            logger.error("snapshot_path_invalid", account=account.name, error=str(e))
            return SaveResult(
                success=False,
                path="",
                error_code=LedgerErrorCode.IO_ERROR,
                error_message=str(e),
            )

        content = render_snapshot(account)
        count = account.transaction_count()

        try:
            self._write(path, content)
            verified = self._verify(path, content)
        except (OSError, UnicodeError) as e:
            logger.error("snapshot_write_failed", path=str(path), error=str(e))
            return SaveResult(
                success=False,
                path=str(path),
                transaction_count=count,
                error_code=LedgerErrorCode.IO_ERROR,
                error_message=f"Error opening file: {path} ({e})",
            )

        if not verified:
            logger.error("snapshot_verification_failed", path=str(path))
            return SaveResult(
                success=False,
                path=str(path),
                transaction_count=count,
                error_code=LedgerErrorCode.IO_ERROR,
                error_message="File creation failed!",
            )

        logger.info("snapshot_saved", path=str(path), transactions=count)
        return SaveResult(success=True, path=str(path), transaction_count=count)

    def load_snapshot(
        self,
        account_name: str,
        registry: Optional[UserRegistry] = None,
    ) -> Account:
        path = self.snapshot_path(account_name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            raise NotFoundError(f"No snapshot for {account_name!r} at {path}")
        except UnicodeDecodeError as e:
            raise SnapshotFormatError(f"{path} is not UTF-8 text: {e}")
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}")

        name, balance, records = parse_snapshot(text)
        try:
            initial_balance = balance - sum((r.signed_amount for r in records), Decimal("0"))
            store = TransactionStore.from_records(records, initial_balance=initial_balance)
        except DecimalException as e:
            raise SnapshotFormatError(f"Amounts in {path} overflow the balance: {e!r}")

        logger.info("snapshot_loaded", path=str(path), transactions=len(store))
        try:
            return Account(name, registry=registry, store=store)
        except ValueError as e:
            raise SnapshotFormatError(f"Invalid user name in {path}: {e}")
