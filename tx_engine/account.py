"""
account.py - Per-client account state

An Account holds one client's available and held funds plus the lock flag.
It knows nothing about other clients or about transaction history: the
Ledger decides whether an operation is legal and which amount applies.
"""

from __future__ import annotations
from decimal import Decimal

from .core import (
    AccountReport, InsufficientFunds,
    DEFAULT_ROUNDING, ZERO,
    round_amount,
)


class Account:
    """
    Mutable balance state for a single client.

    Amounts are accumulated in full precision; the read accessors round to
    four decimal places with the account's rounding mode. ``total`` is always
    derived from ``available + held`` and never stored.

    States: Active (initial) and Locked. ``chargeback`` moves the account to
    Locked, which is terminal. The Account does not refuse operations once
    locked; the Ledger skips locked accounts.

    Example:
        account = Account()
        account.deposit(Decimal("6"))
        account.dispute(Decimal("4"))
        account.available   # Decimal("2.0000")
        account.total       # Decimal("6.0000")
    """

    __slots__ = ("_available", "_held", "_locked", "rounding")

    def __init__(self, rounding: str = DEFAULT_ROUNDING):
        self._available = ZERO
        self._held = ZERO
        self._locked = False
        self.rounding = rounding

    # ========================================================================
    # ACCESSORS
    # ========================================================================

    @property
    def available(self) -> Decimal:
        """Funds the client may withdraw, rounded."""
        return round_amount(self._available, self.rounding)

    @property
    def held(self) -> Decimal:
        """Funds frozen by open disputes, rounded."""
        return round_amount(self._held, self.rounding)

    @property
    def total(self) -> Decimal:
        """available + held, summed before rounding."""
        return round_amount(self._available + self._held, self.rounding)

    @property
    def locked(self) -> bool:
        return self._locked

    def snapshot(self, client: int) -> AccountReport:
        """Build the report row for this account."""
        return AccountReport(
            client=client,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self._locked,
        )

    # ========================================================================
    # OPERATIONS (Mutating)
    # ========================================================================

    def deposit(self, amount: Decimal) -> None:
        """Credit the account."""
        self._available += amount

    def withdrawal(self, amount: Decimal) -> None:
        """
        Debit the account.

        Raises:
            InsufficientFunds: If the debit would leave available funds negative.
                The account is left unchanged.
        """
        if self._available - amount < ZERO:
            raise InsufficientFunds(
                f"cannot withdraw {amount}: only {self._available} available"
            )
        self._available -= amount

    def dispute(self, amount: Decimal) -> None:
        """Move an amount from available to held. Either side may go negative."""
        self._available -= amount
        self._held += amount

    def resolve(self, amount: Decimal) -> None:
        """Release held funds back to available."""
        self._available += amount
        self._held -= amount

    def chargeback(self, amount: Decimal) -> None:
        """Remove held funds and lock the account."""
        self._held -= amount
        self._locked = True

    def copy(self) -> Account:
        cloned = Account(self.rounding)
        cloned._available = self._available
        cloned._held = self._held
        cloned._locked = self._locked
        return cloned

    def __repr__(self) -> str:
        state = "locked" if self._locked else "active"
        return f"Account(available={self._available}, held={self._held}, {state})"
