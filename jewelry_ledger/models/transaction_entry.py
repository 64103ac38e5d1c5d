"""
Transaction entry model.

Each entry is one leg of a transaction: a debit or a credit
against a single account. Exactly one of debit_amount and
credit_amount is positive; the other is zero. The ledger
service enforces this before anything is written.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base


class TransactionEntry(Base):
    __tablename__ = "transaction_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    transaction: Mapped["Transaction"] = relationship(
        back_populates="entries"
    )
    account: Mapped["Account"] = relationship(back_populates="entries")

    def __repr__(self) -> str:
        return (
            f"<TransactionEntry account={self.account_id} "
            f"Dr {self.debit_amount} Cr {self.credit_amount}>"
        )
