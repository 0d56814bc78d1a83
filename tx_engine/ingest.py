"""
ingest.py - Read transaction records from CSV

The input has a header naming the columns ``type, client, tx, amount`` (in
any order). Whitespace around fields is ignored and rows for dispute,
resolve and chargeback may omit the trailing amount column.

Any malformed record aborts the whole read with a ParseError that names the
offending line.
"""

from __future__ import annotations
import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .core import (
    Kind, Transaction, ParseError,
    MAX_CLIENT_ID, MAX_TX_ID, MAX_AMOUNT_INTEGER_DIGITS,
)
from .logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
OPTIONAL_COLUMNS = ("amount",)

_KINDS_BY_NAME = {kind.value: kind for kind in Kind}


def read_transactions(path: Union[str, Path]) -> List[Transaction]:
    """
    Read every transaction from a CSV file.

    Raises:
        ParseError: If the file cannot be opened or any record is invalid.
    """
    path = Path(path)
    try:
        with path.open(newline="", encoding="utf-8") as f:
            transactions = list(parse_transactions(f))
    except OSError as e:
        raise ParseError(f"{path} is not a readable file: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"{path} is not valid UTF-8 text: {e.reason} at byte {e.start}") from e
    logger.info("transactions read", path=str(path), count=len(transactions))
    return transactions


def parse_transactions(lines: Iterable[str]) -> Iterator[Transaction]:
    """
    Parse CSV text (header first) into Transaction records.

    Args:
        lines: Any iterable of CSV lines, e.g. an open file

    Yields:
        Transactions in input order

    Raises:
        ParseError: On a missing header or the first invalid record.
    """
    reader = csv.reader(lines)
    rows = _rows(reader)
    header = next(rows, None)
    if header is None:
        return
    columns = _column_index(header)

    for row in rows:
        if not row or all(not field.strip() for field in row):
            continue
        yield parse_record(row, columns, reader.line_num)


def _rows(reader) -> Iterator[List[str]]:
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise ParseError(f"malformed CSV: {e}", line=reader.line_num) from e
        yield row


def _column_index(header: List[str]) -> Dict[str, int]:
    names = [name.strip().lower() for name in header]
    missing = [c for c in REQUIRED_COLUMNS if c not in names]
    if missing:
        raise ParseError(f"header is missing column(s): {', '.join(missing)}", line=1)
    return {name: idx for idx, name in enumerate(names) if name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}


def _field(row: List[str], columns: Dict[str, int], name: str) -> str:
    idx = columns.get(name)
    if idx is None or idx >= len(row):
        return ""
    return row[idx].strip()


def parse_record(row: List[str], columns: Dict[str, int], line: Optional[int] = None) -> Transaction:
    """
    Convert one CSV row into a Transaction.

    Enforces field presence: deposits and withdrawals must carry an amount,
    disputes, resolves and chargebacks must not.
    """
    type_field = _field(row, columns, "type")
    kind = _KINDS_BY_NAME.get(type_field.lower())
    if kind is None:
        raise ParseError(f"unknown transaction type {type_field!r}", line=line)

    client = _parse_id(_field(row, columns, "client"), "client", MAX_CLIENT_ID, line, kind)
    tx_id = _parse_id(_field(row, columns, "tx"), "tx", MAX_TX_ID, line, kind)
    amount = _parse_amount(_field(row, columns, "amount"), line, kind)

    if kind.is_disputable and amount is None:
        raise ParseError(f"{kind.label} transactions must contain an amount", line=line, kind=kind)
    if not kind.is_disputable and amount is not None:
        raise ParseError(f"{kind.label} transactions cannot contain an amount", line=line, kind=kind)

    return Transaction(kind, client, tx_id, amount)


def _parse_id(text: str, name: str, upper: int, line: Optional[int], kind: Kind) -> int:
    try:
        value = int(text)
    except ValueError:
        raise ParseError(f"invalid {name} id {text!r}", line=line, kind=kind) from None
    if not 0 <= value <= upper:
        raise ParseError(f"{name} id {value} out of range 0..{upper}", line=line, kind=kind)
    return value


def _parse_amount(text: str, line: Optional[int], kind: Kind) -> Optional[Decimal]:
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ParseError(f"invalid amount {text!r}", line=line, kind=kind) from None
    if not amount.is_finite():
        raise ParseError(f"amount must be finite, got {text!r}", line=line, kind=kind)
    if amount < 0:
        raise ParseError(f"amount cannot be negative, got {text!r}", line=line, kind=kind)
    if amount and amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        raise ParseError(
            f"amount {text!r} exceeds {MAX_AMOUNT_INTEGER_DIGITS} integer digits", line=line, kind=kind
        )
    return amount
