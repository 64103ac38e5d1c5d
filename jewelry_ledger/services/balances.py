"""
Reading and writing account balances.

Reads derive balances from entries; they are what reports and
integrity checks trust. Writes go through BalanceWriter, which
is the only code that touches Account.current_balance.

Amounts are summed here in Python rather than with SQL SUM:
some backends return floats from SUM over NUMERIC columns and
a ledger cannot afford the rounding.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.models.account import Account
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.models.transaction_entry import TransactionEntry
from jewelry_ledger.services.account_tree import (
    ZERO,
    AccountTree,
    signed_amount,
)

logger = logging.getLogger(__name__)

# (account_id, debit_amount, credit_amount)
Leg = tuple[int, Decimal, Decimal]


def load_tree(db: Session) -> AccountTree:
    """Snapshot every account into an AccountTree."""
    accounts = db.execute(select(Account)).scalars().all()
    return AccountTree.from_accounts(accounts)


def signed_movements(
    db: Session,
    tree: AccountTree,
    start: date | None = None,
    end: date | None = None,
    account_ids: Iterable[int] | None = None,
    cost_center_id: int | None = None,
) -> dict[int, Decimal]:
    """
    Net effect of posted entries per account, in each account's
    own sign convention, for transactions dated in [start, end].
    """
    query = (
        select(
            TransactionEntry.account_id,
            TransactionEntry.debit_amount,
            TransactionEntry.credit_amount,
        )
        .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
    )
    if start is not None:
        query = query.where(Transaction.transaction_date >= start)
    if end is not None:
        query = query.where(Transaction.transaction_date <= end)
    if account_ids is not None:
        query = query.where(TransactionEntry.account_id.in_(list(account_ids)))
    if cost_center_id is not None:
        query = query.where(Transaction.cost_center_id == cost_center_id)

    movements: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for account_id, debit, credit in db.execute(query):
        node = tree[account_id]
        movements[account_id] += signed_amount(
            node.account_type, Decimal(debit), Decimal(credit)
        )
    return dict(movements)


def own_balances(
    db: Session,
    tree: AccountTree,
    as_of: date | None = None,
    account_ids: Iterable[int] | None = None,
) -> dict[int, Decimal]:
    """
    Opening balance plus own entries dated on or before as_of.

    Descendants are not included. With as_of=None every entry
    counts, which is what the cached balance reflects.
    """
    ids = list(account_ids) if account_ids is not None else list(tree.nodes)
    movements = signed_movements(db, tree, end=as_of, account_ids=ids)
    return {
        account_id: tree[account_id].opening_balance
        + movements.get(account_id, ZERO)
        for account_id in ids
    }


class BalanceWriter:
    """
    Applies balance deltas to cached account balances.

    Rows are loaded FOR UPDATE in id order so concurrent writers
    always lock in the same sequence. Account.balance_version is
    checked on flush; a writer that lost a race gets a
    StaleDataError, which run_atomic turns into a retry.
    """

    def __init__(self, db: Session):
        self.db = db

    def apply(self, deltas: dict[int, Decimal]) -> None:
        """Add each delta to exactly the account it is keyed by."""
        deltas = {k: v for k, v in deltas.items() if v}
        if not deltas:
            return

        # populate_existing overwrites loaded rows; push pending changes first
        self.db.flush()
        accounts = self.db.execute(
            select(Account)
            .where(Account.id.in_(sorted(deltas)))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()

        for account in accounts:
            account.current_balance += deltas[account.id]
        self.db.flush()

        logger.debug("Applied balance deltas to %d accounts", len(accounts))

    def post_legs(
        self,
        tree: AccountTree,
        posted: Iterable[Leg] = (),
        reversed_legs: Iterable[Leg] = (),
    ) -> dict[int, Decimal]:
        """
        Apply the effect of posting some legs and reversing others.

        Each leg moves its account by the signed amount for that
        account's type, and every ancestor by the same amount.
        Returns the expanded delta map that was applied.
        """
        leaf: dict[int, Decimal] = defaultdict(lambda: ZERO)
        for account_id, debit, credit in posted:
            leaf[account_id] += signed_amount(
                tree[account_id].account_type, debit, credit
            )
        for account_id, debit, credit in reversed_legs:
            leaf[account_id] -= signed_amount(
                tree[account_id].account_type, debit, credit
            )

        expanded = tree.expand_to_ancestors(dict(leaf))
        self.apply(expanded)
        return expanded
