"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from jewelry_ledger.models.base import Base
from jewelry_ledger.models.enums import (
    AccountType,
    NormalSide,
    TransactionType,
    SourceKind,
    CashFlowActivity,
    AccountSubtype,
    RecurrenceFrequency,
)
from jewelry_ledger.models.audit_log import AuditLog
from jewelry_ledger.models.account import Account
from jewelry_ledger.models.cost_center import CostCenter
from jewelry_ledger.models.fixed_asset import FixedAsset
from jewelry_ledger.models.currency import Currency
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.models.recurring_transaction import RecurringTransaction
from jewelry_ledger.models.transaction_entry import TransactionEntry

__all__ = [
    "Base",
    "AccountType",
    "NormalSide",
    "TransactionType",
    "SourceKind",
    "CashFlowActivity",
    "AccountSubtype",
    "RecurrenceFrequency",
    "AuditLog",
    "Account",
    "CostCenter",
    "FixedAsset",
    "Currency",
    "Transaction",
    "TransactionEntry",
    "RecurringTransaction",
]
