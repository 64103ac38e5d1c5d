"""
Pydantic schemas for financial reports.

Every report is built from labelled lines grouped into
sections, with totals and, where the report has one, a flag
telling whether its accounting identity holds.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from jewelry_ledger.models.enums import AccountType


class ReportLine(BaseModel):
    label: str
    amount: Decimal
    account_id: int | None = None
    code: str | None = None


class ReportSection(BaseModel):
    label: str
    lines: list[ReportLine]
    total: Decimal


# --- Trial Balance ---

class TrialBalanceRow(BaseModel):
    account_id: int | None
    code: str | None
    name: str
    account_type: AccountType
    balance: Decimal
    debit: Decimal
    credit: Decimal


class TrialBalanceReport(BaseModel):
    as_of: date
    rows: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    balanced: bool


# --- Balance Sheet ---

class BalanceSheetReport(BaseModel):
    as_of: date
    assets: list[ReportSection]
    liabilities: list[ReportSection]
    equity: ReportSection
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    balanced: bool


# --- Income Statement ---

class IncomeStatementReport(BaseModel):
    start_date: date
    end_date: date
    cost_center_id: int | None
    revenue: list[ReportSection]
    expenses: list[ReportSection]
    total_revenue: Decimal
    cost_of_goods_sold: Decimal
    total_expenses: Decimal
    gross_profit: Decimal
    net_profit: Decimal


# --- Cash Flow ---

class CashFlowReport(BaseModel):
    start_date: date
    end_date: date
    opening_cash: Decimal
    activities: list[ReportSection]
    net_change: Decimal
    closing_cash: Decimal
    reconciled: bool


# --- Aging ---

class AgingBucket(BaseModel):
    label: str
    amount: Decimal
    count: int


class AgingItem(BaseModel):
    invoice_id: int
    reference_number: str
    due_date: date
    days_overdue: int
    outstanding: Decimal
    bucket: str


class AgingReport(BaseModel):
    as_of: date
    kind: str
    buckets: list[AgingBucket]
    items: list[AgingItem]
    total: Decimal


# --- General Ledger ---

class GeneralLedgerLine(BaseModel):
    transaction_id: int
    transaction_date: date
    reference_number: str
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


class GeneralLedgerReport(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    start_date: date
    end_date: date
    opening_balance: Decimal
    lines: list[GeneralLedgerLine]
    closing_balance: Decimal


# --- Cost Centers ---

class CostCenterSummaryRow(BaseModel):
    cost_center_id: int | None
    code: str | None
    name: str
    revenue: Decimal
    expenses: Decimal
    net: Decimal


class CostCenterSummaryReport(BaseModel):
    start_date: date
    end_date: date
    rows: list[CostCenterSummaryRow]
