"""
conftest.py - Shared pytest fixtures for tx_engine tests

Provides:
- Transaction builders (deposit, withdrawal, dispute, resolve, chargeback)
- Fresh and pre-funded ledgers
- Paths to the CSV fixtures under tests/fixtures
"""

from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

from tx_engine import Ledger, Transaction, Kind


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def deposit(client: int, tx: int, amount) -> Transaction:
    return Transaction(Kind.DEPOSIT, client, tx, Decimal(str(amount)))


def withdrawal(client: int, tx: int, amount) -> Transaction:
    return Transaction(Kind.WITHDRAWAL, client, tx, Decimal(str(amount)))


def dispute(client: int, tx: int) -> Transaction:
    return Transaction(Kind.DISPUTE, client, tx)


def resolve(client: int, tx: int) -> Transaction:
    return Transaction(Kind.RESOLVE, client, tx)


def chargeback(client: int, tx: int) -> Transaction:
    return Transaction(Kind.CHARGEBACK, client, tx)


def balances(ledger: Ledger, client: int) -> tuple:
    """(available, held, total, locked) for a client."""
    account = ledger.get_account(client)
    return account.available, account.held, account.total, account.locked


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def tx():
    """Namespace of transaction builders, so tests need not import conftest."""
    return SimpleNamespace(
        deposit=deposit,
        withdrawal=withdrawal,
        dispute=dispute,
        resolve=resolve,
        chargeback=chargeback,
        balances=balances,
    )


@pytest.fixture
def ledger():
    """Fresh ledger with no accounts."""
    return Ledger()


@pytest.fixture
def funded_ledger():
    """Ledger where client 1 holds 10.0 from deposit tx 1."""
    ledger = Ledger()
    ledger.handle_transactions([deposit(1, 1, "10.0")])
    return ledger


@pytest.fixture
def fixture_path():
    """Resolve a CSV fixture by file name."""
    def _path(name: str) -> Path:
        return FIXTURES_DIR / name
    return _path
