"""
Command-line entry point.

Usage:
    tx-engine transactions.csv > accounts.csv
    python -m tx_engine transactions.csv --rounding half-even
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from .core import EngineError, ROUNDING_MODES
from .ingest import read_transactions
from .ledger import Ledger
from .logging_config import configure_logging, get_logger
from .report import write_report

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tx-engine",
        description="Replay a CSV of transactions and print the final state of every client account.",
    )
    parser.add_argument("path", help="CSV file with columns type,client,tx,amount")
    parser.add_argument(
        "--rounding",
        choices=sorted(ROUNDING_MODES),
        default="half-up",
        help="rounding applied to reported amounts at the 4th decimal (default: half-up)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="log level for diagnostics written to stderr (default: WARNING)",
    )
    parser.add_argument("--log-json", action="store_true", help="emit logs as JSON lines")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.log_json)

    try:
        transactions = read_transactions(args.path)
        ledger = Ledger(rounding=ROUNDING_MODES[args.rounding], verbose=args.log_level == "DEBUG")
        ledger.handle_transactions(transactions)
        write_report(ledger.get_accounts_report(), sys.stdout)
    except (EngineError, OSError) as e:
        logger.error("processing failed", path=args.path, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
