"""
Cost center model.

A flat tag transactions can be grouped by in reports.
Cost centers have no balance of their own.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base, utc_now


class CostCenter(Base):
    __tablename__ = "cost_centers"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    name_local: Mapped[str | None] = mapped_column(String(150), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="cost_center"
    )
    fixed_assets: Mapped[list["FixedAsset"]] = relationship(
        back_populates="cost_center"
    )

    def __repr__(self) -> str:
        return f"<CostCenter {self.code}>"
