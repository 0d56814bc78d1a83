#!/usr/bin/env python3
"""
Benchmark: replay a generated multi-client batch.

Generates a deterministic CSV of deposits, withdrawals and dispute flows,
then times parsing and replay separately.

Usage:
    python3 scripts/bench.py [--clients 1000] [--per-client 100] [--seed 42]
"""

import argparse
import io
import random
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from tx_engine import Ledger, parse_transactions  # noqa: E402
from tx_engine.logging_config import configure_logging  # noqa: E402
from tx_engine.utils import timing  # noqa: E402


def generate_csv(clients: int, per_client: int, seed: int) -> str:
    rng = random.Random(seed)
    lines = ["type,client,tx,amount"]
    next_tx = 1
    open_txs = {client: [] for client in range(1, clients + 1)}
    for _ in range(clients * per_client):
        client = rng.randint(1, clients)
        roll = rng.random()
        if roll < 0.5 or not open_txs[client]:
            amount = Decimal(rng.randint(1, 1_000_000)) / 10000
            kind = "deposit" if roll < 0.35 or not open_txs[client] else "withdrawal"
            lines.append(f"{kind},{client},{next_tx},{amount}")
            open_txs[client].append(next_tx)
            next_tx += 1
        else:
            ref = rng.choice(open_txs[client])
            kind = rng.choice(["dispute", "dispute", "resolve", "chargeback"])
            lines.append(f"{kind},{client},{ref},")
    return "\n".join(lines) + "\n"


@timing
def parse(text: str):
    return list(parse_transactions(io.StringIO(text)))


@timing
def replay(transactions):
    ledger = Ledger()
    ledger.handle_transactions(transactions)
    return ledger.get_accounts_report()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--clients", type=int, default=1000)
    parser.add_argument("--per-client", type=int, default=100)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    configure_logging(level="WARNING")
    text = generate_csv(args.clients, args.per_client, args.seed)
    transactions = parse(text)
    reports = replay(transactions)

    print(f"transactions : {len(transactions)}")
    print(f"accounts     : {len(reports)}")
    print(f"parse        : {parse.elapsed_ms:.2f} ms")
    print(f"replay       : {replay.elapsed_ms:.2f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
