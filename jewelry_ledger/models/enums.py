"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        """Assets and expenses grow with debits; the rest with credits."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class NormalSide(str, enum.Enum):
    """Side of the ledger on which an account's balance grows."""
    DEBIT = "debit"
    CREDIT = "credit"


class TransactionType(str, enum.Enum):
    JOURNAL = "journal"
    INVOICE = "invoice"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"
    RECURRING = "recurring"


class SourceKind(str, enum.Enum):
    """Business document a transaction was posted from."""
    INVOICE = "invoice"
    ASSET_DISPOSAL = "asset_disposal"
    ASSET_DEPRECIATION = "asset_depreciation"
    RECURRING_INVOICE = "recurring_invoice"
    MANUAL = "manual"


class CashFlowActivity(str, enum.Enum):
    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


# Subtypes the reports look for. Accounts may use any other string.
class AccountSubtype:
    CASH = "cash"
    BANK = "bank"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    ACCOUNTS_PAYABLE = "accounts_payable"
    CURRENT_ASSET = "current_asset"
    FIXED_ASSET = "fixed_asset"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LIABILITY = "long_term_liability"
    OPERATING_REVENUE = "operating_revenue"
    OTHER_REVENUE = "other_revenue"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSE = "operating_expense"
    OTHER_EXPENSE = "other_expense"

    CASH_SUBTYPES = frozenset({CASH, BANK})


class RecurrenceFrequency(str, enum.Enum):
    """How often a recurring template posts."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
