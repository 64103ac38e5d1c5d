"""
Cost center service.

Cost centers are a flat tag for slicing transactions in
reports. They carry no balances, so the only rules are unique
codes and no deletion while something still points at them.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.exceptions import (
    ConflictError,
    NoOpError,
    NotFoundError,
    ValidationError,
)
from jewelry_ledger.models.cost_center import CostCenter
from jewelry_ledger.models.fixed_asset import FixedAsset
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.schemas.cost_center import CostCenterCreate, CostCenterUpdate
from jewelry_ledger.services.audit import record_audit

logger = logging.getLogger(__name__)


class CostCenterService:

    def __init__(self, db: Session):
        self.db = db

    def register(self, request: CostCenterCreate) -> CostCenter:
        existing = self.db.execute(
            select(CostCenter).where(CostCenter.code == request.code)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Cost center with code '{request.code}' already exists"
            )

        cost_center = CostCenter(
            code=request.code,
            name=request.name,
            name_local=request.name_local,
            description=request.description,
        )
        self.db.add(cost_center)
        self.db.flush()
        record_audit(self.db, "cost_center.registered", "cost_center",
                     cost_center.id, {"code": cost_center.code})
        logger.info("Registered cost center %s", cost_center.code)
        return cost_center

    def get(self, cost_center_id: int) -> CostCenter:
        cost_center = self.db.get(CostCenter, cost_center_id)
        if not cost_center:
            raise NotFoundError(f"Cost center {cost_center_id} not found")
        return cost_center

    def list(self, active_only: bool = False) -> list[CostCenter]:
        query = select(CostCenter).order_by(CostCenter.code)
        if active_only:
            query = query.where(CostCenter.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def update(self, cost_center_id: int, request: CostCenterUpdate) -> CostCenter:
        cost_center = self.get(cost_center_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(cost_center, field, value)
        self.db.flush()
        return cost_center

    def deactivate(self, cost_center_id: int) -> CostCenter:
        cost_center = self.get(cost_center_id)
        if not cost_center.is_active:
            raise NoOpError(f"Cost center {cost_center.code} is already inactive")
        cost_center.is_active = False
        self.db.flush()
        record_audit(self.db, "cost_center.deactivated", "cost_center",
                     cost_center.id, {"code": cost_center.code})
        return cost_center

    def delete(self, cost_center_id: int) -> None:
        """Raises ConflictError while transactions or assets reference it."""
        cost_center = self.get(cost_center_id)

        in_use = self.db.execute(
            select(Transaction.id)
            .where(Transaction.cost_center_id == cost_center_id)
            .limit(1)
        ).scalar_one_or_none()
        if in_use is not None:
            raise ConflictError(
                f"Cost center {cost_center.code} has transactions"
            )

        has_assets = self.db.execute(
            select(FixedAsset.id)
            .where(FixedAsset.cost_center_id == cost_center_id)
            .limit(1)
        ).scalar_one_or_none()
        if has_assets is not None:
            raise ConflictError(
                f"Cost center {cost_center.code} has fixed assets"
            )

        record_audit(self.db, "cost_center.deleted", "cost_center",
                     cost_center.id, {"code": cost_center.code})
        self.db.delete(cost_center)
        self.db.flush()
        logger.info("Deleted cost center %s", cost_center.code)
