"""
Fixed asset reference.

Fixed assets belong to the asset module. The ledger keeps just
enough of them to know which cost centers are still in use and
to let depreciation and disposal postings point at an asset.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import String, Date, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jewelry_ledger.models.base import Base


class FixedAsset(Base):
    __tablename__ = "fixed_assets"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    cost_center_id: Mapped[int | None] = mapped_column(
        ForeignKey("cost_centers.id"), nullable=True, index=True
    )
    acquisition_cost: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    acquired_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    cost_center: Mapped["CostCenter | None"] = relationship(
        back_populates="fixed_assets"
    )

    def __repr__(self) -> str:
        return f"<FixedAsset {self.code}>"
