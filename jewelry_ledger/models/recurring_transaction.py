"""
Recurring transaction model.

A template that posts the same balanced transaction on a schedule
(rent, salaries, insurance). The template column keeps the entries
and money fields as JSON; each run becomes an ordinary transaction
linked back through recurring_template_id.
"""

from datetime import date, datetime

from sqlalchemy import String, Boolean, Date, DateTime, Integer, JSON
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base, utc_now
from jewelry_ledger.models.enums import RecurrenceFrequency


class RecurringTransaction(Base):
    __tablename__ = "recurring_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    name_local: Mapped[str | None] = mapped_column(String(150), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description_local: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    frequency: Mapped[RecurrenceFrequency] = mapped_column(
        SAEnum(
            RecurrenceFrequency,
            name="recurrence_frequency_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_run_date: Mapped[date] = mapped_column(
        Date, nullable=False, index=True
    )
    max_occurrences: Mapped[int | None] = mapped_column(Integer, nullable=True)
    occurrences_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    template: Mapped[dict] = mapped_column(JSON, nullable=False)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="recurring_template",
        order_by="Transaction.transaction_date",
    )

    def __repr__(self) -> str:
        return f"<RecurringTransaction {self.name} {self.frequency.value}>"
