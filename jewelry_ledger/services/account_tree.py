"""
In-memory view of the account hierarchy.

The database stores the tree as parent_id pointers. Walking
it through ORM relationships costs one query per level, so
services load every account once into an AccountTree and do
the walking here. Nodes are kept in a dict keyed by id with a
separate child index; there are no object references between
nodes, so a corrupted parent chain cannot hang a walk.
"""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from jewelry_ledger.exceptions import StructuralError
from jewelry_ledger.models.enums import AccountType

ZERO = Decimal("0.00")


def signed_amount(
    account_type: AccountType, debit: Decimal, credit: Decimal
) -> Decimal:
    """
    Effect of a debit/credit pair on a balance of this type.

    Debit-normal accounts (assets, expenses) grow with debits.
    Everything else grows with credits.
    """
    if account_type.is_debit_normal:
        return debit - credit
    return credit - debit


@dataclass(frozen=True)
class AccountNode:
    id: int
    code: str
    name: str
    account_type: AccountType
    parent_id: int | None = None
    opening_balance: Decimal = ZERO
    current_balance: Decimal = ZERO
    subtype: str | None = None
    name_local: str | None = None
    is_active: bool = True

    def label(self, locale: str | None, local_language: str) -> str:
        if locale == local_language and self.name_local:
            return self.name_local
        return self.name


class AccountTree:
    """Arena of AccountNodes with parent and child lookups."""

    def __init__(self, nodes: Iterable[AccountNode]):
        self.nodes: dict[int, AccountNode] = {n.id: n for n in nodes}
        self._children: dict[int, list[int]] = defaultdict(list)
        for node in self.sorted_nodes():
            if node.parent_id is not None:
                self._children[node.parent_id].append(node.id)

    @classmethod
    def from_accounts(cls, accounts) -> "AccountTree":
        return cls(
            AccountNode(
                id=a.id,
                code=a.code,
                name=a.name,
                account_type=a.account_type,
                parent_id=a.parent_id,
                opening_balance=a.opening_balance,
                current_balance=a.current_balance,
                subtype=a.subtype,
                name_local=a.name_local,
                is_active=a.is_active,
            )
            for a in accounts
        )

    def __contains__(self, account_id: int) -> bool:
        return account_id in self.nodes

    def __getitem__(self, account_id: int) -> AccountNode:
        return self.nodes[account_id]

    def sorted_nodes(self) -> list[AccountNode]:
        """All nodes ordered by account code."""
        return sorted(self.nodes.values(), key=lambda n: n.code)

    def roots(self) -> list[int]:
        return [
            n.id for n in self.sorted_nodes()
            if n.parent_id is None or n.parent_id not in self.nodes
        ]

    def children(self, account_id: int) -> list[int]:
        return list(self._children.get(account_id, []))

    def ancestors(self, account_id: int) -> list[int]:
        """
        Parent chain of an account, nearest first.

        Raises StructuralError if the stored chain loops back on
        itself, which can only happen if the data was edited
        outside the services.
        """
        chain: list[int] = []
        seen = {account_id}
        current = self.nodes[account_id].parent_id
        while current is not None and current in self.nodes:
            if current in seen:
                raise StructuralError(
                    f"Account hierarchy contains a cycle at account {current}"
                )
            seen.add(current)
            chain.append(current)
            current = self.nodes[current].parent_id
        return chain

    def descendants(self, account_id: int) -> list[int]:
        """Every account below this one, depth first."""
        found: list[int] = []
        seen = {account_id}
        stack = list(reversed(self.children(account_id)))
        while stack:
            node_id = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            found.append(node_id)
            stack.extend(reversed(self.children(node_id)))
        return found

    def subtree(self, account_id: int) -> list[int]:
        return [account_id] + self.descendants(account_id)

    def would_create_cycle(
        self, account_id: int, new_parent_id: int | None
    ) -> bool:
        """True if making new_parent_id the parent of account_id loops."""
        if new_parent_id is None:
            return False
        if new_parent_id == account_id:
            return True
        return account_id in self.ancestors(new_parent_id)

    def depth(self, account_id: int) -> int:
        return len(self.ancestors(account_id))

    def expand_to_ancestors(
        self, deltas: dict[int, Decimal]
    ) -> dict[int, Decimal]:
        """
        Spread per-account deltas onto every ancestor.

        The same signed delta is added at every level: a parent's
        balance is the plain sum of its own movement and its
        children's balances.
        """
        expanded: dict[int, Decimal] = defaultdict(lambda: ZERO)
        for account_id, delta in deltas.items():
            if not delta:
                continue
            expanded[account_id] += delta
            for ancestor_id in self.ancestors(account_id):
                expanded[ancestor_id] += delta
        return {k: v for k, v in expanded.items() if v}

    def roll_up(self, own: dict[int, Decimal]) -> dict[int, Decimal]:
        """Turn own balances into rolled-up balances for every node."""
        totals: dict[int, Decimal] = {}
        for root in self.roots():
            order = [root] + self.descendants(root)
            for node_id in reversed(order):
                totals[node_id] = own.get(node_id, ZERO) + sum(
                    (totals.get(c, ZERO) for c in self.children(node_id)),
                    ZERO,
                )
        return totals
