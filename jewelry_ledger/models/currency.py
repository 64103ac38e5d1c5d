"""
Currency model.

Exchange rates are relative to a single base currency.
Exactly one row has is_base set; CurrencyService keeps it so.
"""

from decimal import Decimal

from sqlalchemy import String, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from jewelry_ledger.models.base import Base


class Currency(Base):
    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(3), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(15, 6), nullable=False, default=Decimal("1")
    )
    is_base: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    def __repr__(self) -> str:
        marker = " base" if self.is_base else ""
        return f"<Currency {self.code} {self.exchange_rate}{marker}>"
