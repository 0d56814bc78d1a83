"""
Core types for the transaction engine.

This module provides the foundational data structures shared by the account
state machine, the ledger and its collaborators:
1. Enums: Kind (transaction kinds), ApplyOutcome, IgnoreReason
2. Immutable data structures: Transaction, AccountReport, ApplyResult
3. Exceptions: EngineError and domain-specific error types
4. Constants: identifier bounds, report precision, rounding modes

Nothing in this module mutates account state.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, ROUND_HALF_EVEN, getcontext, localcontext
from enum import Enum
from typing import Dict, Optional


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balances are accumulated in full precision and only rounded when read.
# prec=50 leaves ample headroom for long batches of 4-place amounts.
#
_ENGINE_DECIMAL_CONTEXT = getcontext()
_ENGINE_DECIMAL_CONTEXT.prec = 50


# ============================================================================
# CONSTANTS
# ============================================================================

# Client ids are 16-bit unsigned, tx ids 32-bit unsigned.
MAX_CLIENT_ID = 65535
MAX_TX_ID = 4294967295

# Reported balances carry at most 4 fractional digits.
REPORT_DECIMAL_PLACES = 4
REPORT_QUANTIZER = Decimal(10) ** -REPORT_DECIMAL_PLACES

# Input amounts must be below 10**MAX_AMOUNT_INTEGER_DIGITS.
MAX_AMOUNT_INTEGER_DIGITS = 28

DEFAULT_ROUNDING = ROUND_HALF_UP

# Names accepted on the command line for the rounding convention.
ROUNDING_MODES: Dict[str, str] = {
    'half-up': ROUND_HALF_UP,
    'half-even': ROUND_HALF_EVEN,
}

ZERO = Decimal("0")


# ============================================================================
# ENUMS
# ============================================================================

class Kind(Enum):
    """
    The five transaction kinds understood by the engine.

    Values match the lowercase ``type`` column of the input CSV.
    """
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def label(self) -> str:
        """Capitalized name used in error messages (e.g. "Deposit")."""
        return self.value.capitalize()

    @property
    def is_disputable(self) -> bool:
        """Only deposits and withdrawals can be the target of a dispute."""
        return self in (Kind.DEPOSIT, Kind.WITHDRAWAL)


class ApplyOutcome(Enum):
    """
    Outcome of replaying a single transaction against an account.

    APPLIED: The account operation was invoked.
    IGNORED: The record had no effect; the accompanying reason says why.
    """
    APPLIED = "applied"
    IGNORED = "ignored"


class IgnoreReason(Enum):
    """Why a transaction was absorbed without touching the account."""
    INSUFFICIENT_FUNDS = "insufficient_funds"   # withdrawal exceeded available funds
    UNKNOWN_REFERENCE = "unknown_reference"     # tx id never seen for this client
    UNLINKED = "unlinked"                       # no disputable record at replay time
    ACCOUNT_LOCKED = "account_locked"           # client group skipped by the lock gate


# ============================================================================
# EXCEPTIONS
# ============================================================================

class EngineError(Exception):
    """Base exception for all transaction engine errors."""
    pass


class AccountError(EngineError):
    """Raised when an account operation cannot be carried out."""
    pass


class InsufficientFunds(AccountError):
    """Raised when a withdrawal would drive available funds below zero."""
    pass


class ParseError(EngineError):
    """
    Raised when a transaction record cannot be read.

    Attributes:
        line: 1-based line number in the source (header is line 1), if known.
        kind: Transaction kind of the offending record, if it could be read.
    """

    def __init__(self, message: str, line: Optional[int] = None, kind: Optional[Kind] = None):
        self.message = message
        self.line = line
        self.kind = kind
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A single transaction record as read from the input.

    Attributes:
        kind: One of the five transaction kinds.
        client: Client identifier.
        tx: Transaction identifier. Dispute, resolve and chargeback records
            reuse the id of the deposit or withdrawal they refer to.
        amount: Amount for deposits and withdrawals, None otherwise.

    Field presence is validated at ingest (see tx_engine.ingest); this class
    only guards against non-Decimal amounts.
    """
    kind: Kind
    client: int
    tx: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.amount is not None and not isinstance(self.amount, Decimal):
            raise ValueError(f"Transaction amount must be Decimal, got {type(self.amount)}")

    @property
    def signed_amount(self) -> Optional[Decimal]:
        """
        Effect of this record on available funds.

        Positive for deposits, negative for withdrawals and None for the
        kinds that carry no amount.
        """
        if self.amount is None:
            return None
        if self.kind == Kind.WITHDRAWAL:
            return -self.amount
        return self.amount

    def __repr__(self) -> str:
        amount = "" if self.amount is None else f" {self.amount}"
        return f"Transaction({self.kind.value} client={self.client} tx={self.tx}{amount})"


@dataclass(frozen=True, slots=True)
class AccountReport:
    """
    Snapshot of one client's account, produced at report time.

    All amounts are already rounded to REPORT_DECIMAL_PLACES.
    """
    client: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass(frozen=True, slots=True)
class ApplyResult:
    """
    Record of what the ledger did with one transaction.

    Attributes:
        transaction: The record that was replayed.
        outcome: APPLIED or IGNORED.
        reason: Set when outcome is IGNORED.
        amount: Signed amount handed to the account operation, if any.
    """
    transaction: Transaction
    outcome: ApplyOutcome
    reason: Optional[IgnoreReason] = None
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.outcome == ApplyOutcome.IGNORED and self.reason is None:
            raise ValueError("Ignored results must carry a reason")
        if self.outcome == ApplyOutcome.APPLIED and self.reason is not None:
            raise ValueError("Applied results cannot carry a reason")

    @property
    def applied(self) -> bool:
        return self.outcome == ApplyOutcome.APPLIED

    @classmethod
    def ok(cls, transaction: Transaction, amount: Decimal) -> ApplyResult:
        return cls(transaction, ApplyOutcome.APPLIED, amount=amount)

    @classmethod
    def ignored(cls, transaction: Transaction, reason: IgnoreReason) -> ApplyResult:
        return cls(transaction, ApplyOutcome.IGNORED, reason=reason)


def round_amount(value: Decimal, rounding: str = DEFAULT_ROUNDING) -> Decimal:
    """
    Round a value to REPORT_DECIMAL_PLACES using quantize.

    Args:
        value: Amount to round.
        rounding: A decimal rounding mode (default ROUND_HALF_UP).
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    # quantize needs one digit per integer place plus the fractional places.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + REPORT_DECIMAL_PLACES + 2)
        return value.quantize(REPORT_QUANTIZER, rounding=rounding)
