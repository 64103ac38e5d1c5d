"""
Ledger service, the core of the accounting system.

This service enforces the fundamental rules:
1. Every transaction balances (debits = credits = total amount)
2. Every entry has exactly one positive side
3. Accounts and cost centers must exist and be active
4. Locked transactions cannot change

It is the only writer of transactions and entries. Every write
also moves the cached balances of the accounts involved and all
their ancestors, inside one savepoint, so entries and balances
are never out of step. The caller commits.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from jewelry_ledger.config import Settings, get_settings
from jewelry_ledger.exceptions import (
    AlreadyApprovedError,
    LockedTransactionError,
    NoOpError,
    NotFoundError,
    ValidationError,
)
from jewelry_ledger.models.account import Account
from jewelry_ledger.models.base import utc_now
from jewelry_ledger.models.cost_center import CostCenter
from jewelry_ledger.models.enums import TransactionType
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.models.transaction_entry import TransactionEntry
from jewelry_ledger.schemas.transaction import (
    BalanceDrift,
    IntegrityResponse,
    ManualSource,
    TransactionDraft,
    TransactionEntryCreate,
)
from jewelry_ledger.services.account_tree import ZERO
from jewelry_ledger.services.audit import record_audit
from jewelry_ledger.services.balances import (
    BalanceWriter,
    Leg,
    load_tree,
    own_balances,
)
from jewelry_ledger.services.currency_service import CurrencyService
from jewelry_ledger.services.unit_of_work import run_atomic
from jewelry_ledger.services.validation import DraftCheck, check_draft, money

logger = logging.getLogger(__name__)


COPY_SUFFIX = " (Copy)"
DESCRIPTION_LIMIT = 255


def _copy_label(text: str) -> str:
    return text[:DESCRIPTION_LIMIT - len(COPY_SUFFIX)] + COPY_SUFFIX


class LedgerService:
    """
    All transaction operations pass through this service.

    The service takes a database session as a constructor
    argument. This means the caller controls the transaction
    boundary: they decide when to commit or rollback.
    """

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.balances = BalanceWriter(db)

    # --- Reads ---

    def get_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn

    def list_transactions(
        self,
        start: date | None = None,
        end: date | None = None,
        transaction_type: TransactionType | None = None,
        cost_center_id: int | None = None,
    ) -> list[Transaction]:
        query = select(Transaction).order_by(
            Transaction.transaction_date, Transaction.id
        )
        if start is not None:
            query = query.where(Transaction.transaction_date >= start)
        if end is not None:
            query = query.where(Transaction.transaction_date <= end)
        if transaction_type is not None:
            query = query.where(Transaction.transaction_type == transaction_type)
        if cost_center_id is not None:
            query = query.where(Transaction.cost_center_id == cost_center_id)
        return list(self.db.execute(query).scalars().all())

    def entries_for_account(
        self,
        account_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[TransactionEntry]:
        """Entries posted to one account, oldest first."""
        query = (
            select(TransactionEntry)
            .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
            .where(TransactionEntry.account_id == account_id)
            .order_by(Transaction.transaction_date, Transaction.id, TransactionEntry.id)
        )
        if start is not None:
            query = query.where(Transaction.transaction_date >= start)
        if end is not None:
            query = query.where(Transaction.transaction_date <= end)
        return list(self.db.execute(query).scalars().all())

    # --- Writes ---

    def validate(self, draft: TransactionDraft) -> DraftCheck:
        """
        Run every check a draft must pass before it is written:
        the double-entry rules, then account and cost center
        references. Raises the first failure.
        """
        check = check_draft(draft.entries, draft.total_amount)
        if not check.ok:
            raise check.error
        self._validate_references(draft)
        return check

    def create_transaction(
        self,
        draft: TransactionDraft,
        recurring_template_id: int | None = None,
    ) -> Transaction:
        """
        Post a balanced transaction.

        This is the most critical method in the system. Nothing is
        written unless every check passes, and the transaction, its
        entries and every balance it moves are saved together.
        """
        check = self.validate(draft)

        exchange_rate = draft.exchange_rate
        if exchange_rate is None:
            exchange_rate = CurrencyService(self.db).rate_for(draft.currency)
        source_type, source_id, due_date = draft.source.to_columns()

        def post() -> Transaction:
            tree = load_tree(self.db)
            txn = Transaction(
                reference_number=self._next_reference(),
                description=draft.description,
                description_local=draft.description_local,
                transaction_date=draft.transaction_date,
                transaction_type=draft.transaction_type,
                source_type=source_type,
                source_id=source_id,
                due_date=due_date,
                total_amount=check.total_debit,
                currency=draft.currency,
                exchange_rate=exchange_rate,
                cost_center_id=draft.cost_center_id,
                recurring_template_id=recurring_template_id,
                tags=list(draft.tags),
                notes=draft.notes,
                is_locked=False,
                created_by=draft.created_by,
                entries=self._build_entries(draft.entries),
            )
            self.db.add(txn)
            self.balances.post_legs(tree, posted=self._legs(draft.entries))
            self.db.flush()
            record_audit(self.db, "transaction.created", "transaction", txn.id, {
                "reference_number": txn.reference_number,
                "total_amount": txn.total_amount,
                "accounts": sorted({e.account_id for e in draft.entries}),
            })
            return txn

        txn = run_atomic(self.db, post, self.settings, "create transaction")
        logger.info(
            "Posted %s for %s %s (%d entries)",
            txn.reference_number, txn.total_amount, txn.currency, len(txn.entries),
            extra={
                "reference_number": txn.reference_number,
                "transaction_id": txn.id,
            },
        )
        return txn

    def update_transaction(
        self, transaction_id: int, draft: TransactionDraft
    ) -> Transaction:
        """
        Replace the header and entries of an unlocked transaction.

        Balances move by (new entries - old entries). The reference
        number, lock and approval state are kept.
        """
        current = self.get_transaction(transaction_id)
        if current.is_locked:
            raise LockedTransactionError(
                f"Transaction {current.reference_number} is locked"
            )

        check = self.validate(draft)

        exchange_rate = draft.exchange_rate
        if exchange_rate is None:
            exchange_rate = CurrencyService(self.db).rate_for(draft.currency)
        source_type, source_id, due_date = draft.source.to_columns()

        def replace() -> Transaction:
            txn = self._get_for_update(transaction_id)
            if txn.is_locked:
                raise LockedTransactionError(
                    f"Transaction {txn.reference_number} is locked"
                )
            tree = load_tree(self.db)
            old_legs = [
                (e.account_id, e.debit_amount, e.credit_amount)
                for e in txn.entries
            ]
            self.balances.post_legs(
                tree, posted=self._legs(draft.entries), reversed_legs=old_legs
            )

            txn.description = draft.description
            txn.description_local = draft.description_local
            txn.transaction_date = draft.transaction_date
            txn.transaction_type = draft.transaction_type
            txn.source_type = source_type
            txn.source_id = source_id
            txn.due_date = due_date
            txn.total_amount = check.total_debit
            txn.currency = draft.currency
            txn.exchange_rate = exchange_rate
            txn.cost_center_id = draft.cost_center_id
            txn.tags = list(draft.tags)
            txn.notes = draft.notes
            txn.entries = self._build_entries(draft.entries)
            self.db.flush()
            record_audit(self.db, "transaction.updated", "transaction", txn.id, {
                "reference_number": txn.reference_number,
                "total_amount": txn.total_amount,
            })
            return txn

        txn = run_atomic(self.db, replace, self.settings, "update transaction")
        logger.info("Updated %s", txn.reference_number)
        return txn

    def delete_transaction(self, transaction_id: int) -> None:
        """Remove an unlocked transaction and reverse its balances."""
        current = self.get_transaction(transaction_id)
        if current.is_locked:
            raise LockedTransactionError(
                f"Transaction {current.reference_number} is locked"
            )

        def remove() -> str:
            txn = self._get_for_update(transaction_id)
            if txn.is_locked:
                raise LockedTransactionError(
                    f"Transaction {txn.reference_number} is locked"
                )
            tree = load_tree(self.db)
            self.balances.post_legs(tree, reversed_legs=[
                (e.account_id, e.debit_amount, e.credit_amount)
                for e in txn.entries
            ])
            record_audit(self.db, "transaction.deleted", "transaction", txn.id, {
                "reference_number": txn.reference_number,
                "total_amount": txn.total_amount,
            })
            reference = txn.reference_number
            self.db.delete(txn)
            self.db.flush()
            return reference

        reference = run_atomic(self.db, remove, self.settings, "delete transaction")
        logger.info("Deleted %s", reference)

    def lock(self, transaction_id: int) -> Transaction:
        """Freeze a transaction. Locking twice raises NoOpError."""
        return self._set_locked(transaction_id, True)

    def unlock(self, transaction_id: int) -> Transaction:
        """Reopen a transaction. Unlocking twice raises NoOpError."""
        return self._set_locked(transaction_id, False)

    def approve(self, transaction_id: int, approver_id: int) -> Transaction:
        """
        Record an approval. This is one-way: a second approval raises
        AlreadyApprovedError. Approval does not lock.
        """
        def sign_off() -> Transaction:
            txn = self._get_for_update(transaction_id)
            if txn.approved_by is not None:
                raise AlreadyApprovedError(
                    f"Transaction {txn.reference_number} was already "
                    f"approved by {txn.approved_by}"
                )
            txn.approved_by = approver_id
            txn.approved_at = utc_now()
            self.db.flush()
            record_audit(self.db, "transaction.approved", "transaction", txn.id, {
                "approved_by": approver_id,
            })
            return txn

        txn = run_atomic(self.db, sign_off, self.settings, "approve transaction")
        logger.info("%s approved by %s", txn.reference_number, approver_id)
        return txn

    def duplicate(self, transaction_id: int) -> Transaction:
        """
        Copy a transaction's entries into a new one dated today.

        The copy is a manual entry: it is not tied to the invoice or
        asset the original came from, so aging never counts the same
        invoice movement twice.
        """
        original = self.get_transaction(transaction_id)
        draft = TransactionDraft(
            description=_copy_label(original.description),
            description_local=(
                _copy_label(original.description_local)
                if original.description_local else None
            ),
            transaction_date=date.today(),
            transaction_type=original.transaction_type,
            source=ManualSource(),
            total_amount=original.total_amount,
            currency=original.currency,
            exchange_rate=original.exchange_rate,
            cost_center_id=original.cost_center_id,
            tags=list(original.tags or []),
            notes=original.notes,
            created_by=original.created_by,
            entries=[
                TransactionEntryCreate(
                    account_id=e.account_id,
                    debit_amount=e.debit_amount,
                    credit_amount=e.credit_amount,
                    description=e.description,
                )
                for e in original.entries
            ],
        )
        return self.create_transaction(draft)

    # --- Integrity ---

    def check_integrity(self) -> IntegrityResponse:
        """
        Verify the ledger as a whole.

        Total debits must equal total credits across every entry,
        and every cached balance must equal the balance derived
        from entries.
        """
        total_debits = ZERO
        total_credits = ZERO
        for debit, credit in self.db.execute(
            select(TransactionEntry.debit_amount, TransactionEntry.credit_amount)
        ):
            total_debits += Decimal(debit)
            total_credits += Decimal(credit)

        tree = load_tree(self.db)
        computed = tree.roll_up(own_balances(self.db, tree))
        drifted = [
            BalanceDrift(
                account_id=node.id,
                account_code=node.code,
                cached_balance=node.current_balance,
                computed_balance=computed.get(node.id, ZERO),
            )
            for node in tree.sorted_nodes()
            if node.current_balance != computed.get(node.id, ZERO)
        ]

        difference = total_debits - total_credits
        return IntegrityResponse(
            total_debits=total_debits,
            total_credits=total_credits,
            difference=difference,
            is_balanced=difference == 0 and not drifted,
            drifted_accounts=drifted,
        )

    def rebuild_balances(self) -> int:
        """
        Recompute every cached balance from entries.

        Returns the number of accounts that were corrected.
        """
        def rebuild() -> int:
            tree = load_tree(self.db)
            computed = tree.roll_up(own_balances(self.db, tree))
            deltas = {}
            for node in tree.sorted_nodes():
                drift = computed.get(node.id, ZERO) - node.current_balance
                if drift:
                    logger.warning(
                        "Account %s cached %s but entries give %s",
                        node.code, node.current_balance, computed.get(node.id, ZERO),
                    )
                    deltas[node.id] = drift
            self.balances.apply(deltas)
            if deltas:
                record_audit(self.db, "ledger.balances_rebuilt", "account", None, {
                    "corrected": sorted(deltas),
                })
            return len(deltas)

        return run_atomic(self.db, rebuild, self.settings, "rebuild balances")

    # --- Helpers ---

    def _set_locked(self, transaction_id: int, locked: bool) -> Transaction:
        action = "lock" if locked else "unlock"

        def toggle() -> Transaction:
            txn = self._get_for_update(transaction_id)
            if txn.is_locked == locked:
                state = "locked" if locked else "unlocked"
                raise NoOpError(
                    f"Transaction {txn.reference_number} is already {state}"
                )
            txn.is_locked = locked
            self.db.flush()
            record_audit(self.db, f"transaction.{action}ed", "transaction",
                         txn.id, {"reference_number": txn.reference_number})
            return txn

        txn = run_atomic(self.db, toggle, self.settings, f"{action} transaction")
        logger.info("%sed %s", action.capitalize(), txn.reference_number)
        return txn

    def _get_for_update(self, transaction_id: int) -> Transaction:
        txn = self.db.get(
            Transaction,
            transaction_id,
            with_for_update=True,
            populate_existing=True,
        )
        if not txn:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn

    def _validate_references(self, draft: TransactionDraft) -> None:
        """Every account must exist and be active; same for the cost center."""
        account_ids = {e.account_id for e in draft.entries}
        accounts = self.db.execute(
            select(Account).where(Account.id.in_(account_ids))
        ).scalars().all()
        accounts_by_id = {a.id: a for a in accounts}

        missing = account_ids - set(accounts_by_id)
        if missing:
            raise ValidationError(f"Accounts not found: {sorted(missing)}")

        for account in sorted(accounts, key=lambda a: a.code):
            if not account.is_active:
                raise ValidationError(f"Account {account.code} is not active")

        if draft.cost_center_id is not None:
            cost_center = self.db.get(CostCenter, draft.cost_center_id)
            if not cost_center:
                raise ValidationError(
                    f"Cost center {draft.cost_center_id} not found"
                )
            if not cost_center.is_active:
                raise ValidationError(
                    f"Cost center {cost_center.code} is not active"
                )

    def _next_reference(self) -> str:
        """
        PREFIX-YYYYMMDD-NNNN, numbered per calendar day.

        The sequence widens past 9999, so the highest number is the
        longest reference first and the greatest among equal lengths.
        """
        prefix = f"{self.settings.REFERENCE_PREFIX}-{date.today():%Y%m%d}-"
        last = self.db.execute(
            select(Transaction.reference_number)
            .where(Transaction.reference_number.like(f"{prefix}%"))
            .order_by(
                func.length(Transaction.reference_number).desc(),
                Transaction.reference_number.desc(),
            )
            .limit(1)
        ).scalar()
        sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    @staticmethod
    def _build_entries(
        entries: list[TransactionEntryCreate],
    ) -> list[TransactionEntry]:
        return [
            TransactionEntry(
                account_id=e.account_id,
                debit_amount=money(e.debit_amount),
                credit_amount=money(e.credit_amount),
                description=e.description,
            )
            for e in entries
        ]

    @staticmethod
    def _legs(entries: list[TransactionEntryCreate]) -> list[Leg]:
        return [
            (e.account_id, money(e.debit_amount), money(e.credit_amount))
            for e in entries
        ]
