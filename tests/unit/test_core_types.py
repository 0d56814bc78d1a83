"""
test_core_types.py - Unit tests for core data structures

Tests:
- Kind: labels, disputable kinds
- Transaction: creation, validation, immutability, signed amounts
- ApplyResult: outcome/reason consistency
- round_amount: both rounding conventions
- ParseError: message formatting
"""

import pytest
from dataclasses import FrozenInstanceError
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP, getcontext

from tx_engine import (
    Kind, Transaction, ApplyResult, ApplyOutcome, IgnoreReason,
    ParseError, EngineError, InsufficientFunds, AccountError,
    round_amount,
)


class TestKind:

    def test_values_match_csv_names(self):
        assert [k.value for k in Kind] == ["deposit", "withdrawal", "dispute", "resolve", "chargeback"]

    def test_label_is_capitalized(self):
        assert Kind.DEPOSIT.label == "Deposit"
        assert Kind.CHARGEBACK.label == "Chargeback"

    def test_only_deposit_and_withdrawal_are_disputable(self):
        disputable = {k for k in Kind if k.is_disputable}
        assert disputable == {Kind.DEPOSIT, Kind.WITHDRAWAL}


class TestTransaction:

    def test_create_deposit(self):
        tx = Transaction(Kind.DEPOSIT, 1, 7, Decimal("1.5"))
        assert tx.kind == Kind.DEPOSIT
        assert tx.client == 1
        assert tx.tx == 7
        assert tx.amount == Decimal("1.5")

    def test_amount_defaults_to_none(self):
        assert Transaction(Kind.DISPUTE, 1, 7).amount is None

    def test_float_amount_rejected(self):
        with pytest.raises(ValueError, match="must be Decimal"):
            Transaction(Kind.DEPOSIT, 1, 1, 1.5)

    def test_is_immutable(self):
        tx = Transaction(Kind.DEPOSIT, 1, 1, Decimal("1"))
        with pytest.raises(FrozenInstanceError):
            tx.amount = Decimal("2")

    def test_equality_by_value(self):
        assert Transaction(Kind.RESOLVE, 2, 3) == Transaction(Kind.RESOLVE, 2, 3)

    def test_signed_amount_of_deposit_is_positive(self):
        assert Transaction(Kind.DEPOSIT, 1, 1, Decimal("3")).signed_amount == Decimal("3")

    def test_signed_amount_of_withdrawal_is_negative(self):
        assert Transaction(Kind.WITHDRAWAL, 1, 1, Decimal("3")).signed_amount == Decimal("-3")

    def test_signed_amount_without_amount_is_none(self):
        assert Transaction(Kind.CHARGEBACK, 1, 1).signed_amount is None

    def test_repr(self):
        assert repr(Transaction(Kind.DEPOSIT, 1, 2, Decimal("1.0"))) == "Transaction(deposit client=1 tx=2 1.0)"
        assert repr(Transaction(Kind.DISPUTE, 1, 2)) == "Transaction(dispute client=1 tx=2)"


class TestApplyResult:

    def test_ok(self):
        tx = Transaction(Kind.DEPOSIT, 1, 1, Decimal("1"))
        result = ApplyResult.ok(tx, Decimal("1"))
        assert result.outcome == ApplyOutcome.APPLIED
        assert result.applied
        assert result.reason is None
        assert result.amount == Decimal("1")

    def test_ignored(self):
        tx = Transaction(Kind.DISPUTE, 1, 1)
        result = ApplyResult.ignored(tx, IgnoreReason.UNLINKED)
        assert result.outcome == ApplyOutcome.IGNORED
        assert not result.applied
        assert result.reason == IgnoreReason.UNLINKED

    def test_ignored_without_reason_rejected(self):
        with pytest.raises(ValueError):
            ApplyResult(Transaction(Kind.DISPUTE, 1, 1), ApplyOutcome.IGNORED)

    def test_applied_with_reason_rejected(self):
        with pytest.raises(ValueError):
            ApplyResult(
                Transaction(Kind.DISPUTE, 1, 1), ApplyOutcome.APPLIED,
                reason=IgnoreReason.UNLINKED,
            )


class TestRoundAmount:

    def test_four_places(self):
        assert str(round_amount(Decimal("1.5"))) == "1.5000"

    def test_half_up_by_default(self):
        assert round_amount(Decimal("8.00015")) == Decimal("8.0002")
        assert round_amount(Decimal("8.00025")) == Decimal("8.0003")

    def test_half_even(self):
        assert round_amount(Decimal("8.00015"), ROUND_HALF_EVEN) == Decimal("8.0002")
        assert round_amount(Decimal("8.00025"), ROUND_HALF_EVEN) == Decimal("8.0002")

    def test_negative_half_up_rounds_away_from_zero(self):
        assert round_amount(Decimal("-0.00005"), ROUND_HALF_UP) == Decimal("-0.0001")

    def test_accepts_non_decimal(self):
        assert round_amount(2) == Decimal("2.0000")

    def test_beyond_context_precision(self):
        value = Decimal("1e60") + Decimal("0.00005")
        assert round_amount(value) == Decimal("1e60")
        assert getcontext().prec == 50


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(InsufficientFunds, AccountError)
        assert issubclass(AccountError, EngineError)
        assert issubclass(ParseError, EngineError)

    def test_parse_error_with_line(self):
        err = ParseError("bad amount", line=4, kind=Kind.DEPOSIT)
        assert str(err) == "line 4: bad amount"
        assert err.message == "bad amount"
        assert err.line == 4
        assert err.kind == Kind.DEPOSIT

    def test_parse_error_without_line(self):
        err = ParseError("file missing")
        assert str(err) == "file missing"
        assert err.line is None
        assert err.kind is None
