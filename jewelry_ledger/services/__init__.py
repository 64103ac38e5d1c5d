"""Business logic services."""

from jewelry_ledger.services.account_service import AccountService
from jewelry_ledger.services.cost_center_service import CostCenterService
from jewelry_ledger.services.currency_service import CurrencyService
from jewelry_ledger.services.ledger_service import LedgerService
from jewelry_ledger.services.recurring_service import RecurringTransactionService
from jewelry_ledger.services.report_service import ReportService

__all__ = [
    "AccountService",
    "CostCenterService",
    "CurrencyService",
    "LedgerService",
    "RecurringTransactionService",
    "ReportService",
]
