"""
Chart of accounts API endpoints.

The API layer is thin: it handles HTTP concerns and delegates
all business logic to AccountService.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.models.enums import AccountType
from jewelry_ledger.schemas.account import (
    AccountBalanceResponse,
    AccountCreate,
    AccountReparent,
    AccountResponse,
    AccountTreeNode,
    AccountUpdate,
)
from jewelry_ledger.schemas.report import GeneralLedgerReport
from jewelry_ledger.services.account_service import AccountService
from jewelry_ledger.services.report_service import ReportService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def register_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Add an account to the chart."""
    service = AccountService(db)
    try:
        account = service.register_account(request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    account_type: AccountType | None = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
):
    return AccountService(db).list_accounts(account_type, active_only)


@router.get("/tree", response_model=list[AccountTreeNode])
def chart_tree(
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    """The chart as a tree with rolled-up balances."""
    return AccountService(db).chart_tree(as_of)


@router.post("/seed", response_model=list[AccountResponse], status_code=201)
def seed_default_chart(db: Session = Depends(get_db)):
    """
    Create the standard jewelry chart of accounts.

    Existing codes are left alone; only new accounts are returned.
    """
    service = AccountService(db)
    try:
        created = service.seed_default_chart()
        db.commit()
        return created
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    try:
        return AccountService(db).get_account(account_id)
    except LedgerError as e:
        raise http_error(e)


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: int,
    request: AccountUpdate,
    db: Session = Depends(get_db),
):
    service = AccountService(db)
    try:
        account = service.update_account(account_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Blocked while the account has entries or children."""
    service = AccountService(db)
    try:
        service.delete_account(account_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.put("/{account_id}/parent", response_model=AccountResponse)
def reparent_account(
    account_id: int,
    request: AccountReparent,
    db: Session = Depends(get_db),
):
    """Move an account and its subtree under a new parent."""
    service = AccountService(db)
    try:
        account = service.reparent(account_id, request.parent_id)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    account_id: int,
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Balance derived from entries, optionally as of a past date.

    balance includes every descendant; own_balance does not.
    """
    service = AccountService(db)
    try:
        account = service.get_account(account_id)
        balance = service.compute_balance(account_id, as_of)
        own = service.own_balance(account_id, as_of)
    except LedgerError as e:
        raise http_error(e)

    return AccountBalanceResponse(
        account_id=account.id,
        account_code=account.code,
        account_type=account.account_type,
        as_of=as_of,
        balance=balance,
        own_balance=own,
        currency=account.currency,
    )


@router.get("/{account_id}/ledger", response_model=GeneralLedgerReport)
def get_account_ledger(
    account_id: int,
    start: date | None = None,
    end: date | None = None,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    """Entries on the account with a running balance."""
    try:
        return ReportService(db, locale=locale).general_ledger(
            account_id, start, end
        )
    except LedgerError as e:
        raise http_error(e)
