"""
tx_engine - Client account replay engine

Replays deposits, withdrawals and dispute outcomes per client and reports
final balances.

Usage:
    from decimal import Decimal
    from tx_engine import Ledger, Transaction, Kind

    ledger = Ledger()
    ledger.handle_transactions([
        Transaction(Kind.DEPOSIT, 1, 1, Decimal("1.0")),
        Transaction(Kind.WITHDRAWAL, 1, 2, Decimal("0.5")),
    ])
    for row in ledger.get_accounts_report():
        print(row)
"""

# Core types
from .core import (
    Kind,
    Transaction,
    AccountReport,
    ApplyOutcome,
    ApplyResult,
    IgnoreReason,
    EngineError,
    AccountError,
    InsufficientFunds,
    ParseError,
    round_amount,
    DEFAULT_ROUNDING,
    ROUNDING_MODES,
    REPORT_DECIMAL_PLACES,
    MAX_CLIENT_ID,
    MAX_TX_ID,
    MAX_AMOUNT_INTEGER_DIGITS,
)

# Account and Ledger
from .account import Account
from .ledger import Ledger, group_transactions, linked_amount

# Input / output
from .ingest import read_transactions, parse_transactions, parse_record
from .report import write_report, format_amount, REPORT_HEADER

__version__ = "0.1.0"

