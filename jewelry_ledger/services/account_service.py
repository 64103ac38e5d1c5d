"""
Account service: the chart of accounts.

This service owns the shape of the account tree: codes are
unique, parent chains never loop, and an account with history
or children cannot be removed. Balance reads are always derived
from entries; cached balances are only moved through
BalanceWriter, inside run_atomic, so they stay in step with the
entries that justify them.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.config import Settings, get_settings
from jewelry_ledger.exceptions import (
    ConflictError,
    NotFoundError,
    StructuralError,
    ValidationError,
)
from jewelry_ledger.models.account import Account
from jewelry_ledger.models.enums import AccountType
from jewelry_ledger.models.transaction_entry import TransactionEntry
from jewelry_ledger.schemas.account import (
    AccountCreate,
    AccountTreeNode,
    AccountUpdate,
)
from jewelry_ledger.services.account_tree import ZERO, AccountTree
from jewelry_ledger.services.audit import record_audit
from jewelry_ledger.services.balances import (
    BalanceWriter,
    load_tree,
    own_balances,
)
from jewelry_ledger.services.default_chart import DEFAULT_CHART
from jewelry_ledger.services.unit_of_work import run_atomic
from jewelry_ledger.services.validation import money

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.balances = BalanceWriter(db)

    # --- Lookups ---

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def get_account_by_code(self, code: str) -> Account:
        account = self.db.execute(
            select(Account).where(Account.code == code)
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account with code '{code}' not found")
        return account

    def list_accounts(
        self,
        account_type: AccountType | None = None,
        active_only: bool = False,
    ) -> list[Account]:
        query = select(Account).order_by(Account.code)
        if account_type is not None:
            query = query.where(Account.account_type == account_type)
        if active_only:
            query = query.where(Account.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    # --- Structure ---

    def register_account(self, request: AccountCreate) -> Account:
        """
        Add an account to the chart.

        Raises ValidationError if the code is taken or the parent
        does not resolve to an account with an acyclic chain.
        """
        existing = self.db.execute(
            select(Account).where(Account.code == request.code)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Account with code '{request.code}' already exists"
            )

        tree = load_tree(self.db)
        if request.parent_id is not None:
            if request.parent_id not in tree:
                raise ValidationError(
                    f"Parent account {request.parent_id} not found"
                )
            try:
                tree.ancestors(request.parent_id)
            except StructuralError as e:
                raise ValidationError(e.message) from e

        opening = money(request.opening_balance)

        def register() -> Account:
            account = Account(
                code=request.code,
                name=request.name,
                name_local=request.name_local,
                account_type=request.account_type,
                subtype=request.subtype,
                description=request.description,
                parent_id=request.parent_id,
                currency=request.currency,
                opening_balance=opening,
                current_balance=opening,
                is_active=request.is_active,
                is_system=request.is_system,
            )
            self.db.add(account)
            if request.parent_id is not None and opening:
                self.balances.apply(tree.expand_to_ancestors(
                    {request.parent_id: opening}
                ))
            self.db.flush()
            record_audit(self.db, "account.registered", "account", account.id, {
                "code": account.code,
                "type": account.account_type.value,
                "parent_id": account.parent_id,
                "opening_balance": opening,
            })
            return account

        account = run_atomic(self.db, register, self.settings, "register account")
        logger.info(
            "Registered account %s (%s)", account.code, account.account_type.value
        )
        return account

    def reparent(self, account_id: int, new_parent_id: int | None) -> Account:
        """
        Move an account, with its subtree, under a new parent.

        The subtree's rolled-up balance leaves the old ancestor
        chain and joins the new one in the same unit of work.
        """
        account = self.get_account(account_id)
        if new_parent_id == account.parent_id:
            return account

        def move() -> Account:
            tree = load_tree(self.db)
            if new_parent_id is not None and new_parent_id not in tree:
                raise ValidationError(f"Parent account {new_parent_id} not found")
            if tree.would_create_cycle(account_id, new_parent_id):
                raise StructuralError(
                    f"Moving account {account_id} under {new_parent_id} "
                    f"would create a cycle"
                )

            subtree_total = tree[account_id].current_balance
            deltas: dict[int, Decimal] = {}
            for ancestor_id in tree.ancestors(account_id):
                deltas[ancestor_id] = deltas.get(ancestor_id, ZERO) - subtree_total
            if new_parent_id is not None:
                for ancestor_id in [new_parent_id] + tree.ancestors(new_parent_id):
                    deltas[ancestor_id] = (
                        deltas.get(ancestor_id, ZERO) + subtree_total
                    )
            self.balances.apply(deltas)

            moved = self.get_account(account_id)
            old_parent_id = moved.parent_id
            moved.parent_id = new_parent_id
            self.db.flush()
            record_audit(self.db, "account.reparented", "account", moved.id, {
                "from": old_parent_id,
                "to": new_parent_id,
                "moved_balance": subtree_total,
            })
            return moved

        account = run_atomic(self.db, move, self.settings, "reparent account")
        logger.info("Moved account %s under %s", account.code, new_parent_id)
        return account

    def update_account(self, account_id: int, request: AccountUpdate) -> Account:
        """
        Apply a partial update.

        A changed opening balance shifts the account and every
        ancestor by the difference.
        """
        self.get_account(account_id)
        changes = request.model_dump(exclude_unset=True)

        def update() -> Account:
            fields = dict(changes)
            new_opening = fields.pop("opening_balance", None)
            account = self.get_account(account_id)
            if new_opening is not None:
                diff = money(new_opening) - account.opening_balance
                if diff:
                    tree = load_tree(self.db)
                    self.balances.apply(tree.expand_to_ancestors({account_id: diff}))
                    account = self.get_account(account_id)
                account.opening_balance = money(new_opening)
            for field, value in fields.items():
                if value is None and field in ("name", "is_active"):
                    continue
                setattr(account, field, value)
            self.db.flush()
            record_audit(self.db, "account.updated", "account", account.id, {
                "fields": sorted(changes),
            })
            return account

        return run_atomic(self.db, update, self.settings, "update account")

    def delete_account(self, account_id: int) -> None:
        """
        Remove an account that has no entries and no children.

        Raises ConflictError for system accounts and for accounts
        with dependents.
        """
        account = self.get_account(account_id)
        if account.is_system:
            raise ConflictError(f"Account {account.code} is a system account")

        has_entries = self.db.execute(
            select(TransactionEntry.id)
            .where(TransactionEntry.account_id == account_id)
            .limit(1)
        ).scalar_one_or_none()
        if has_entries is not None:
            raise ConflictError(
                f"Account {account.code} has posted entries and cannot be deleted"
            )

        has_children = self.db.execute(
            select(Account.id).where(Account.parent_id == account_id).limit(1)
        ).scalar_one_or_none()
        if has_children is not None:
            raise ConflictError(
                f"Account {account.code} has child accounts and cannot be deleted"
            )

        code = account.code

        def delete() -> None:
            tree = load_tree(self.db)
            contribution = tree[account_id].current_balance
            self.balances.apply({
                ancestor_id: -contribution
                for ancestor_id in tree.ancestors(account_id)
            })
            record_audit(self.db, "account.deleted", "account", account_id, {
                "code": code,
            })
            self.db.delete(self.get_account(account_id))
            self.db.flush()

        run_atomic(self.db, delete, self.settings, "delete account")
        logger.info("Deleted account %s", code)

    # --- Balances ---

    def compute_balance(
        self, account_id: int, as_of: date | None = None
    ) -> Decimal:
        """
        Rolled-up balance derived from entries.

        Own opening balance and entries dated on or before as_of,
        plus the same for every descendant. With as_of=None this
        equals the cached current_balance.
        """
        tree = load_tree(self.db)
        if account_id not in tree:
            raise NotFoundError(f"Account {account_id} not found")
        subtree = tree.subtree(account_id)
        own = own_balances(self.db, tree, as_of=as_of, account_ids=subtree)
        return sum((own[i] for i in subtree), ZERO)

    def own_balance(self, account_id: int, as_of: date | None = None) -> Decimal:
        """Opening balance plus own entries, without descendants."""
        tree = load_tree(self.db)
        if account_id not in tree:
            raise NotFoundError(f"Account {account_id} not found")
        own = own_balances(self.db, tree, as_of=as_of, account_ids=[account_id])
        return own[account_id]

    def chart_tree(self, as_of: date | None = None) -> list[AccountTreeNode]:
        """The whole chart as nested nodes with rolled-up balances."""
        tree = load_tree(self.db)
        rolled = tree.roll_up(own_balances(self.db, tree, as_of=as_of))

        def build(node_id: int) -> AccountTreeNode:
            node = tree[node_id]
            return AccountTreeNode(
                id=node.id,
                code=node.code,
                name=node.name,
                account_type=node.account_type,
                subtype=node.subtype,
                is_active=node.is_active,
                balance=rolled.get(node_id, ZERO),
                children=[build(c) for c in tree.children(node_id)],
            )

        return [build(root) for root in tree.roots()]

    def seed_default_chart(self) -> list[Account]:
        """
        Create the standard jewelry chart of accounts.

        Codes that already exist are skipped, so running this
        twice is harmless. Returns the accounts it created.
        """
        existing = {
            a.code: a.id for a in self.db.execute(select(Account)).scalars()
        }
        created = []
        for code, name, name_local, account_type, subtype, parent_code in DEFAULT_CHART:
            if code in existing:
                continue
            account = self.register_account(AccountCreate(
                code=code,
                name=name,
                name_local=name_local,
                account_type=account_type,
                subtype=subtype,
                parent_id=existing.get(parent_code) if parent_code else None,
                currency=self.settings.BASE_CURRENCY,
                is_system=True,
            ))
            existing[code] = account.id
            created.append(account)

        logger.info("Seeded %d default accounts", len(created))
        return created
