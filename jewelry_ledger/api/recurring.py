"""
Recurring transaction API endpoints.

A scheduler (cron, a worker) calls POST /run once a day; the run
commits every posting it made together.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.schemas.recurring import (
    RecurringRunFailure,
    RecurringRunResponse,
    RecurringTransactionCreate,
    RecurringTransactionResponse,
)
from jewelry_ledger.schemas.transaction import TransactionResponse
from jewelry_ledger.services.recurring_service import RecurringTransactionService

router = APIRouter(prefix="/recurring-transactions", tags=["Recurring Transactions"])


@router.post("", response_model=RecurringTransactionResponse, status_code=201)
def register_recurring_transaction(
    request: RecurringTransactionCreate,
    db: Session = Depends(get_db),
):
    service = RecurringTransactionService(db)
    try:
        recurring = service.register(request)
        db.commit()
        return recurring
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[RecurringTransactionResponse])
def list_recurring_transactions(
    active_only: bool = False,
    db: Session = Depends(get_db),
):
    return RecurringTransactionService(db).list(active_only)


@router.post("/run", response_model=RecurringRunResponse)
def run_due_recurring_transactions(
    today: date | None = None,
    db: Session = Depends(get_db),
):
    """Post every occurrence due on or before today (default: the server date)."""
    service = RecurringTransactionService(db)
    run_date = today or date.today()
    try:
        posted, failures = service.run_due(run_date)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
    return RecurringRunResponse(
        run_date=run_date,
        posted=[TransactionResponse.model_validate(txn) for txn in posted],
        failures=[
            RecurringRunFailure(template_id=template_id, error=message)
            for template_id, message in failures
        ],
    )


@router.get("/{template_id}", response_model=RecurringTransactionResponse)
def get_recurring_transaction(
    template_id: int,
    db: Session = Depends(get_db),
):
    try:
        return RecurringTransactionService(db).get(template_id)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/{template_id}/deactivate", response_model=RecurringTransactionResponse
)
def deactivate_recurring_transaction(
    template_id: int,
    db: Session = Depends(get_db),
):
    service = RecurringTransactionService(db)
    try:
        recurring = service.deactivate(template_id)
        db.commit()
        return recurring
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
