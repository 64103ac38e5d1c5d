"""Cost center API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.schemas.cost_center import (
    CostCenterCreate,
    CostCenterResponse,
    CostCenterUpdate,
)
from jewelry_ledger.services.cost_center_service import CostCenterService

router = APIRouter(prefix="/cost-centers", tags=["Cost Centers"])


@router.post("", response_model=CostCenterResponse, status_code=201)
def register_cost_center(
    request: CostCenterCreate,
    db: Session = Depends(get_db),
):
    service = CostCenterService(db)
    try:
        cost_center = service.register(request)
        db.commit()
        return cost_center
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[CostCenterResponse])
def list_cost_centers(
    active_only: bool = False,
    db: Session = Depends(get_db),
):
    return CostCenterService(db).list(active_only)


@router.get("/{cost_center_id}", response_model=CostCenterResponse)
def get_cost_center(
    cost_center_id: int,
    db: Session = Depends(get_db),
):
    try:
        return CostCenterService(db).get(cost_center_id)
    except LedgerError as e:
        raise http_error(e)


@router.patch("/{cost_center_id}", response_model=CostCenterResponse)
def update_cost_center(
    cost_center_id: int,
    request: CostCenterUpdate,
    db: Session = Depends(get_db),
):
    service = CostCenterService(db)
    try:
        cost_center = service.update(cost_center_id, request)
        db.commit()
        return cost_center
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{cost_center_id}/deactivate", response_model=CostCenterResponse)
def deactivate_cost_center(
    cost_center_id: int,
    db: Session = Depends(get_db),
):
    service = CostCenterService(db)
    try:
        cost_center = service.deactivate(cost_center_id)
        db.commit()
        return cost_center
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{cost_center_id}", status_code=204)
def delete_cost_center(
    cost_center_id: int,
    db: Session = Depends(get_db),
):
    """Blocked while transactions or fixed assets reference it."""
    service = CostCenterService(db)
    try:
        service.delete(cost_center_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
