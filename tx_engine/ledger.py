"""
ledger.py - Stateful transaction replay over per-client accounts

The Ledger owns every Account and is the only component that mutates them.

Key responsibilities:
    - Partitions a batch of transactions by client, preserving order
    - Drops dispute/resolve/chargeback records that reference a tx the client
      never made
    - Replays each client's group in order, linking disputes to the deposit
      or withdrawal they refer to
    - Skips groups whose account is already locked
    - Produces a report sorted by client id
"""

from __future__ import annotations
from collections import Counter
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .account import Account
from .core import (
    # Types
    Kind, Transaction, AccountReport,
    ApplyOutcome, ApplyResult, IgnoreReason,
    # Constants
    DEFAULT_ROUNDING,
    # Exceptions
    InsufficientFunds,
)
from .logging_config import get_logger

logger = get_logger(__name__)

# Client id -> transactions for that client, in input order.
Groups = Dict[int, List[Transaction]]

# tx id -> most recent deposit or withdrawal carrying that id.
DisputableIndex = Dict[int, Transaction]


# ============================================================================
# GROUPING AND LINKAGE (pure)
# ============================================================================

def group_transactions(
    transactions: Iterable[Transaction],
) -> Tuple[Groups, List[ApplyResult]]:
    """
    Partition a batch by client.

    Deposits and withdrawals are always kept. A dispute, resolve or
    chargeback is kept only if an earlier deposit or withdrawal of the same
    client carries its tx id; otherwise it is dropped. A client whose every
    record is dropped still gets an (empty) group.

    Args:
        transactions: Batch in input order

    Returns:
        (groups, dropped) where dropped holds an IGNORED result for each
        record removed with reason UNKNOWN_REFERENCE.
    """
    groups: Groups = {}
    known_tx: Dict[int, set] = {}
    dropped: List[ApplyResult] = []

    for tx in transactions:
        group = groups.setdefault(tx.client, [])
        seen = known_tx.setdefault(tx.client, set())
        if tx.kind.is_disputable:
            seen.add(tx.tx)
        elif tx.tx not in seen:
            dropped.append(ApplyResult.ignored(tx, IgnoreReason.UNKNOWN_REFERENCE))
            continue
        group.append(tx)

    return groups, dropped


def linked_amount(record: Transaction, disputables: Mapping[int, Transaction]) -> Optional[Decimal]:
    """
    Amount a dispute, resolve or chargeback applies to the account.

    The referenced record is the most recent deposit or withdrawal with the
    same tx id. A deposit contributes its amount unchanged; a withdrawal
    contributes its signed amount negated, so disputing a withdrawal of W
    also holds W.

    Args:
        record: The dispute, resolve or chargeback
        disputables: Index of deposits/withdrawals encountered so far

    Returns:
        The signed amount, or None if nothing is linked.

    A source belonging to another client never links. The ledger indexes
    each client group separately, so this only matters for direct callers
    passing a shared index.
    """
    source = disputables.get(record.tx)
    if source is None or source.client != record.client:
        return None
    amount = source.signed_amount
    if source.kind == Kind.WITHDRAWAL:
        amount = -amount
    return amount


# ============================================================================
# LEDGER
# ============================================================================

class Ledger:
    """
    Owner of all client accounts and replay engine for transaction batches.

    Accounts are created lazily the first time a client appears in a batch
    and live as long as the Ledger. Several batches may be handled in turn;
    a dispute can only link to a deposit or withdrawal from its own batch.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own Ledger instance.

    Example:
        ledger = Ledger()
        ledger.handle_transactions([
            Transaction(Kind.DEPOSIT, 1, 1, Decimal("4.0")),
            Transaction(Kind.DISPUTE, 1, 1),
            Transaction(Kind.CHARGEBACK, 1, 1),
        ])
        ledger.get_accounts_report()
        # [AccountReport(client=1, available=0, held=0, total=0, locked=True)]
    """

    def __init__(
        self,
        accounts: Optional[Mapping[int, Account]] = None,
        rounding: str = DEFAULT_ROUNDING,
        verbose: bool = False,
    ):
        """
        Create a ledger.

        Args:
            accounts: Initial client -> Account mapping. The ledger takes
                ownership of the Account objects.
            rounding: Decimal rounding mode for accounts created by the ledger
            verbose: Log every ignored transaction at DEBUG level
        """
        self._accounts: Dict[int, Account] = dict(accounts or {})
        self.rounding = rounding
        self.verbose = verbose
        # Outcomes of the most recent batch only; replaced on every call.
        self.last_outcomes: List[ApplyResult] = []

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def accounts(self) -> Dict[int, Account]:
        """Shallow copy of the client -> Account mapping."""
        return dict(self._accounts)

    def get_account(self, client: int) -> Optional[Account]:
        """Return the client's Account, or None if the client is unknown."""
        return self._accounts.get(client)

    def list_clients(self) -> List[int]:
        """Sorted ids of all known clients."""
        return sorted(self._accounts)

    def get_accounts_report(self) -> List[AccountReport]:
        """
        One report row per known client, sorted by client id.

        The order does not depend on the order in which clients appeared.
        """
        return [self._accounts[client].snapshot(client) for client in sorted(self._accounts)]

    # ========================================================================
    # REPLAY (Mutating)
    # ========================================================================

    def handle_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, Account]:
        """
        Replay a batch against the client accounts.

        Pass 1 groups the batch by client and drops unknown references.
        Pass 2 replays each group in order against its account.

        Args:
            transactions: Batch in input order

        Returns:
            The client -> Account mapping for the clients in this batch.
        """
        groups, dropped = group_transactions(transactions)
        results: List[ApplyResult] = list(dropped)

        for client, group in groups.items():
            account = self._accounts.get(client)
            if account is None:
                account = self._accounts[client] = Account(self.rounding)

            if account.locked:
                results.extend(ApplyResult.ignored(tx, IgnoreReason.ACCOUNT_LOCKED) for tx in group)
                continue

            results.extend(self._replay_group(account, group))

        self.last_outcomes = results
        self._log_batch(results, len(groups))
        return {client: self._accounts[client] for client in groups}

    def _replay_group(self, account: Account, group: List[Transaction]) -> List[ApplyResult]:
        """Apply one client's transactions in order and return their outcomes."""
        disputables: DisputableIndex = {}
        results = []
        for tx in group:
            if account.locked:
                # A chargeback earlier in this group locked the account.
                results.append(ApplyResult.ignored(tx, IgnoreReason.ACCOUNT_LOCKED))
                continue
            if tx.kind.is_disputable:
                # Failed withdrawals stay linkable, so index before applying.
                disputables[tx.tx] = tx
            results.append(self._apply(account, tx, disputables))
        return results

    def _apply(self, account: Account, tx: Transaction, disputables: DisputableIndex) -> ApplyResult:
        if tx.kind == Kind.DEPOSIT:
            account.deposit(tx.amount)
            return ApplyResult.ok(tx, tx.amount)

        if tx.kind == Kind.WITHDRAWAL:
            try:
                account.withdrawal(tx.amount)
            except InsufficientFunds:
                return ApplyResult.ignored(tx, IgnoreReason.INSUFFICIENT_FUNDS)
            return ApplyResult.ok(tx, tx.amount)

        amount = linked_amount(tx, disputables)
        if amount is None:
            return ApplyResult.ignored(tx, IgnoreReason.UNLINKED)

        if tx.kind == Kind.DISPUTE:
            account.dispute(amount)
        elif tx.kind == Kind.RESOLVE:
            account.resolve(amount)
        elif tx.kind == Kind.CHARGEBACK:
            account.chargeback(amount)
        return ApplyResult.ok(tx, amount)

    def _log_batch(self, results: List[ApplyResult], clients: int) -> None:
        reasons = Counter(r.reason.value for r in results if r.outcome == ApplyOutcome.IGNORED)
        if self.verbose:
            for r in results:
                if r.outcome == ApplyOutcome.IGNORED:
                    logger.debug(
                        "transaction ignored",
                        client=r.transaction.client,
                        tx=r.transaction.tx,
                        kind=r.transaction.kind.value,
                        reason=r.reason.value,
                    )
        logger.info(
            "batch handled",
            clients=clients,
            applied=sum(1 for r in results if r.applied),
            ignored=dict(reasons),
        )

    # ========================================================================
    # COPYING
    # ========================================================================

    def clone(self) -> Ledger:
        """
        Create an independent copy of this ledger.

        Accounts are copied, so replaying further batches on the clone leaves
        the original untouched. Batch outcomes are not copied.
        """
        cloned = Ledger(
            {client: account.copy() for client, account in self._accounts.items()},
            rounding=self.rounding,
            verbose=self.verbose,
        )
        return cloned
