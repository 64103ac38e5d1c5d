"""
Account model (chart of accounts).

Accounts form a tree through parent_id. Entries are posted
against accounts; every posting also moves the cached balance
of each ancestor so a parent always shows its rolled-up total.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Integer, Numeric, ForeignKey, Text,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base, utc_now
from jewelry_ledger.models.enums import AccountType, NormalSide


class Account(Base):
    """
    A single account in the chart of accounts.

    current_balance is a cache of the rolled-up balance
    (opening balance + own entries + descendants). It is only
    written by the ledger service. balance_version is bumped on
    every write and checked on flush, so two writers racing on
    the same row cannot silently overwrite each other.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    name_local: Mapped[str | None] = mapped_column(
        String(150), nullable=True
    )
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    subtype: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    opening_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    balance_version: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
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

    __mapper_args__ = {"version_id_col": balance_version}

    parent: Mapped["Account | None"] = relationship(
        remote_side=[id], back_populates="children"
    )
    children: Mapped[list["Account"]] = relationship(back_populates="parent")
    entries: Mapped[list["TransactionEntry"]] = relationship(
        back_populates="account"
    )

    @property
    def normal_side(self) -> NormalSide:
        if self.account_type.is_debit_normal:
            return NormalSide.DEBIT
        return NormalSide.CREDIT

    def localized_name(self, locale: str | None, local_language: str) -> str:
        """Return name_local for the local language when one is set."""
        if locale == local_language and self.name_local:
            return self.name_local
        return self.name

    def __repr__(self) -> str:
        return f"<Account {self.code} ({self.account_type.value})>"
