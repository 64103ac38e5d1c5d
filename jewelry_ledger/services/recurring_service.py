"""
Recurring transaction service.

Templates post the same balanced transaction on a schedule. A run
posts every occurrence that has fallen due, oldest first, through
the ledger service, so recurring postings obey exactly the same
rules as manual ones. A template whose posting is rejected stays
on the same date and is reported; the other templates still run.

Occurrence dates are counted from start_date rather than from the
previous run, so a monthly template started on the 31st posts on
the last day of shorter months and goes back to the 31st after.
"""

import calendar
import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.config import Settings, get_settings
from jewelry_ledger.exceptions import (
    ContentionError,
    LedgerError,
    NoOpError,
    NotFoundError,
)
from jewelry_ledger.models.enums import RecurrenceFrequency, TransactionType
from jewelry_ledger.models.recurring_transaction import RecurringTransaction
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.schemas.recurring import RecurringTransactionCreate
from jewelry_ledger.schemas.transaction import (
    TransactionDraft,
    TransactionEntryCreate,
)
from jewelry_ledger.services.audit import record_audit
from jewelry_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = {
    "total_amount", "currency", "exchange_rate", "cost_center_id", "notes",
    "entries",
}

MONTHS_PER_STEP = {
    RecurrenceFrequency.MONTHLY: 1,
    RecurrenceFrequency.QUARTERLY: 3,
    RecurrenceFrequency.YEARLY: 12,
}


def add_months(start: date, months: int) -> date:
    """Same day of month, clamped to the last day of a shorter month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def occurrence_date(
    start: date,
    frequency: RecurrenceFrequency,
    interval: int,
    index: int,
) -> date:
    """Date of the index-th occurrence; occurrence 0 is start itself."""
    steps = interval * index
    if frequency == RecurrenceFrequency.DAILY:
        return start + timedelta(days=steps)
    if frequency == RecurrenceFrequency.WEEKLY:
        return start + timedelta(weeks=steps)
    return add_months(start, steps * MONTHS_PER_STEP[frequency])


def should_run(template: RecurringTransaction, today: date) -> bool:
    """Whether the template has an occurrence due on or before today."""
    if not template.is_active:
        return False
    if template.next_run_date > today:
        return False
    if template.end_date and template.next_run_date > template.end_date:
        return False
    if (
        template.max_occurrences
        and template.occurrences_count >= template.max_occurrences
    ):
        return False
    return True


class RecurringTransactionService:

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.ledger = LedgerService(db, self.settings)

    def register(self, request: RecurringTransactionCreate) -> RecurringTransaction:
        """
        Save a template once its entries pass the posting checks.
        The first occurrence is start_date.
        """
        template = request.model_dump(mode="json", include=TEMPLATE_FIELDS)
        recurring = RecurringTransaction(
            name=request.name,
            name_local=request.name_local,
            description=request.description,
            description_local=request.description_local,
            frequency=request.frequency,
            interval=request.interval,
            start_date=request.start_date,
            end_date=request.end_date,
            next_run_date=request.start_date,
            max_occurrences=request.max_occurrences,
            occurrences_count=0,
            is_active=True,
            template=template,
            tags=list(request.tags),
        )
        self.ledger.validate(self._draft(recurring))

        self.db.add(recurring)
        self.db.flush()
        record_audit(self.db, "recurring.registered", "recurring_transaction",
                     recurring.id, {
                         "name": recurring.name,
                         "frequency": recurring.frequency.value,
                         "start_date": recurring.start_date,
                     })
        logger.info(
            "Registered recurring template %s (%s every %d)",
            recurring.name, recurring.frequency.value, recurring.interval,
        )
        return recurring

    def get(self, template_id: int) -> RecurringTransaction:
        recurring = self.db.get(RecurringTransaction, template_id)
        if not recurring:
            raise NotFoundError(f"Recurring transaction {template_id} not found")
        return recurring

    def deactivate(self, template_id: int) -> RecurringTransaction:
        recurring = self.get(template_id)
        if not recurring.is_active:
            raise NoOpError(
                f"Recurring transaction {recurring.name} is already inactive"
            )
        recurring.is_active = False
        self.db.flush()
        record_audit(self.db, "recurring.deactivated", "recurring_transaction",
                     recurring.id, {"name": recurring.name})
        return recurring

    def run_due(
        self, today: date | None = None
    ) -> tuple[list[Transaction], list[tuple[int, str]]]:
        """
        Post every occurrence due on or before today.

        Returns the posted transactions and (template_id, message)
        for each template whose posting was rejected. Missed
        occurrences are caught up one by one, each dated on its own
        scheduled day.
        """
        today = today or date.today()
        due = self.db.execute(
            select(RecurringTransaction)
            .where(
                RecurringTransaction.is_active.is_(True),
                RecurringTransaction.next_run_date <= today,
            )
            .order_by(RecurringTransaction.next_run_date, RecurringTransaction.id)
        ).scalars().all()

        posted: list[Transaction] = []
        failures: list[tuple[int, str]] = []
        for recurring in due:
            while should_run(recurring, today):
                try:
                    txn = self.ledger.create_transaction(
                        self._draft(recurring),
                        recurring_template_id=recurring.id,
                    )
                except ContentionError:
                    raise
                except LedgerError as e:
                    logger.warning(
                        "Recurring template %s not posted for %s: %s",
                        recurring.id, recurring.next_run_date, e.message,
                    )
                    failures.append((recurring.id, e.message))
                    break
                posted.append(txn)
                self._advance(recurring)

        self.db.flush()
        logger.info(
            "Recurring run for %s: %d posted, %d failed",
            today, len(posted), len(failures),
        )
        return posted, failures

    def list(self, active_only: bool = False) -> list[RecurringTransaction]:
        query = select(RecurringTransaction).order_by(
            RecurringTransaction.next_run_date, RecurringTransaction.id
        )
        if active_only:
            query = query.where(RecurringTransaction.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    # --- Internal ---

    def _advance(self, recurring: RecurringTransaction) -> None:
        recurring.occurrences_count += 1
        recurring.next_run_date = occurrence_date(
            recurring.start_date,
            recurring.frequency,
            recurring.interval,
            recurring.occurrences_count,
        )

    @staticmethod
    def _draft(recurring: RecurringTransaction) -> TransactionDraft:
        template = recurring.template
        return TransactionDraft(
            description=recurring.description or recurring.name,
            description_local=recurring.description_local or recurring.name_local,
            transaction_date=recurring.next_run_date,
            transaction_type=TransactionType.RECURRING,
            total_amount=template.get("total_amount"),
            currency=template.get("currency") or "USD",
            exchange_rate=template.get("exchange_rate"),
            cost_center_id=template.get("cost_center_id"),
            tags=list(recurring.tags or []),
            notes=template.get("notes"),
            entries=[
                TransactionEntryCreate(**entry) for entry in template["entries"]
            ],
        )
