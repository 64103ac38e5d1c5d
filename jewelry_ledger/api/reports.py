"""
Financial report endpoints.

All reports are read-only and derived from entries, so any
as_of or date range gives figures as they stood at that time.
Pass locale to get local account names.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelry_ledger.api.errors import http_error
from jewelry_ledger.exceptions import LedgerError
from jewelry_ledger.models.base import get_db
from jewelry_ledger.schemas.report import (
    AgingReport,
    BalanceSheetReport,
    CashFlowReport,
    CostCenterSummaryReport,
    IncomeStatementReport,
    TrialBalanceReport,
)
from jewelry_ledger.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/trial-balance", response_model=TrialBalanceReport)
def trial_balance(
    as_of: date | None = None,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db, locale=locale).trial_balance(as_of)


@router.get("/balance-sheet", response_model=BalanceSheetReport)
def balance_sheet(
    as_of: date | None = None,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db, locale=locale).balance_sheet(as_of)


@router.get("/income-statement", response_model=IncomeStatementReport)
def income_statement(
    start: date | None = None,
    end: date | None = None,
    cost_center_id: int | None = None,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    """Revenue and expense movements within the period only."""
    try:
        return ReportService(db, locale=locale).income_statement(
            start, end, cost_center_id
        )
    except LedgerError as e:
        raise http_error(e)


@router.get("/cash-flow", response_model=CashFlowReport)
def cash_flow(
    start: date | None = None,
    end: date | None = None,
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).cash_flow_statement(start, end)
    except LedgerError as e:
        raise http_error(e)


@router.get("/aged-receivables", response_model=AgingReport)
def aged_receivables(
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db).aged_receivables(as_of)


@router.get("/aged-payables", response_model=AgingReport)
def aged_payables(
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db).aged_payables(as_of)


@router.get("/cost-centers", response_model=CostCenterSummaryReport)
def cost_center_summary(
    start: date | None = None,
    end: date | None = None,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db, locale=locale).cost_center_summary(start, end)
    except LedgerError as e:
        raise http_error(e)
