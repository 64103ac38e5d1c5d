"""Currency API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.schemas.currency import CurrencyCreate, CurrencyResponse
from jewelry_ledger.services.currency_service import CurrencyService

router = APIRouter(prefix="/currencies", tags=["Currencies"])


@router.post("", response_model=CurrencyResponse, status_code=201)
def register_currency(
    request: CurrencyCreate,
    db: Session = Depends(get_db),
):
    """The first currency registered becomes the base."""
    service = CurrencyService(db)
    try:
        currency = service.register_currency(request)
        db.commit()
        return currency
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[CurrencyResponse])
def list_currencies(db: Session = Depends(get_db)):
    return CurrencyService(db).list_currencies()


@router.put("/{code}/base", response_model=CurrencyResponse)
def set_base_currency(
    code: str,
    db: Session = Depends(get_db),
):
    """Make this the base currency; other rates are rescaled to it."""
    service = CurrencyService(db)
    try:
        currency = service.set_base(code)
        db.commit()
        return currency
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
