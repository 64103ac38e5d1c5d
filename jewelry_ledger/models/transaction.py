"""
Transaction model.

A transaction groups two or more entries that must balance.
It carries the business context (type, originating document,
cost center) and the workflow flags: is_locked, which can be
toggled, and approved_by, which is set once and never cleared.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, Date, DateTime, Integer, Numeric, ForeignKey, Text,
    JSON, Enum as SAEnum, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base, utc_now
from jewelry_ledger.models.enums import TransactionType, SourceKind


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    reference_number: Mapped[str] = mapped_column(
        String(40), unique=True, nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    description_local: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    source_type: Mapped[SourceKind] = mapped_column(
        SAEnum(
            SourceKind,
            name="source_kind_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=SourceKind.MANUAL,
    )
    source_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(15, 6), nullable=False, default=Decimal("1")
    )
    cost_center_id: Mapped[int | None] = mapped_column(
        ForeignKey("cost_centers.id"), nullable=True, index=True
    )
    recurring_template_id: Mapped[int | None] = mapped_column(
        ForeignKey("recurring_transactions.id"), nullable=True, index=True
    )
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    approved_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        Index("ix_transactions_date_type", "transaction_date", "transaction_type"),
        Index("ix_transactions_source", "source_type", "source_id"),
    )

    entries: Mapped[list["TransactionEntry"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionEntry.id",
    )
    cost_center: Mapped["CostCenter | None"] = relationship(
        back_populates="transactions"
    )
    recurring_template: Mapped["RecurringTransaction | None"] = relationship(
        back_populates="transactions"
    )

    @property
    def is_approved(self) -> bool:
        return self.approved_by is not None

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.reference_number} "
            f"{self.total_amount} {self.currency}>"
        )
