"""
Transaction API endpoints.

Every write goes through LedgerService, which validates the
double-entry rules and moves balances. This layer commits on
success and rolls back on any ledger error.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.models.enums import TransactionType
from jewelry_ledger.schemas.transaction import (
    ApproveRequest,
    IntegrityResponse,
    TransactionDraft,
    TransactionResponse,
)
from jewelry_ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request: TransactionDraft,
    db: Session = Depends(get_db),
):
    """
    Post a balanced transaction.

    At least two entries, each with exactly one positive side,
    and total debits equal to total credits.
    """
    service = LedgerService(db)
    try:
        txn = service.create_transaction(request)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    start: date | None = None,
    end: date | None = None,
    transaction_type: TransactionType | None = None,
    cost_center_id: int | None = None,
    db: Session = Depends(get_db),
):
    return LedgerService(db).list_transactions(
        start, end, transaction_type, cost_center_id
    )


@router.get("/integrity", response_model=IntegrityResponse)
def check_integrity(db: Session = Depends(get_db)):
    """Whole-ledger debit/credit totals and cached balance drift."""
    return LedgerService(db).check_integrity()


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    try:
        return LedgerService(db).get_transaction(transaction_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    request: TransactionDraft,
    db: Session = Depends(get_db),
):
    """Replace an unlocked transaction's header and entries."""
    service = LedgerService(db)
    try:
        txn = service.update_transaction(transaction_id, request)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        service.delete_transaction(transaction_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{transaction_id}/lock", response_model=TransactionResponse)
def lock_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        txn = service.lock(transaction_id)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{transaction_id}/unlock", response_model=TransactionResponse)
def unlock_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        txn = service.unlock(transaction_id)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{transaction_id}/approve", response_model=TransactionResponse)
def approve_transaction(
    transaction_id: int,
    request: ApproveRequest,
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        txn = service.approve(transaction_id, request.approver_id)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post(
    "/{transaction_id}/duplicate",
    response_model=TransactionResponse,
    status_code=201,
)
def duplicate_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Copy the entries into a new, unlocked transaction dated today."""
    service = LedgerService(db)
    try:
        txn = service.duplicate(transaction_id)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
