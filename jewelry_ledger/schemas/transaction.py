"""
Pydantic schemas for transactions.

A draft is deliberately permissive about entries: the count,
one-sided and balance rules are checked by the ledger service
so callers get the specific double-entry error instead of a
generic validation failure.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from jewelry_ledger.models.enums import SourceKind, TransactionType


# --- Transaction Sources ---
# Each variant names the business document a transaction came
# from and carries its typed reference. `kind` is the tag.

class InvoiceSource(BaseModel):
    kind: Literal["invoice"] = "invoice"
    invoice_id: int
    due_date: date | None = None

    def to_columns(self) -> tuple[SourceKind, int | None, date | None]:
        return SourceKind.INVOICE, self.invoice_id, self.due_date


class AssetDisposalSource(BaseModel):
    kind: Literal["asset_disposal"] = "asset_disposal"
    asset_id: int

    def to_columns(self) -> tuple[SourceKind, int | None, date | None]:
        return SourceKind.ASSET_DISPOSAL, self.asset_id, None


class AssetDepreciationSource(BaseModel):
    kind: Literal["asset_depreciation"] = "asset_depreciation"
    asset_id: int

    def to_columns(self) -> tuple[SourceKind, int | None, date | None]:
        return SourceKind.ASSET_DEPRECIATION, self.asset_id, None


class RecurringInvoiceSource(BaseModel):
    kind: Literal["recurring_invoice"] = "recurring_invoice"
    template_id: int

    def to_columns(self) -> tuple[SourceKind, int | None, date | None]:
        return SourceKind.RECURRING_INVOICE, self.template_id, None


class ManualSource(BaseModel):
    kind: Literal["manual"] = "manual"

    def to_columns(self) -> tuple[SourceKind, int | None, date | None]:
        return SourceKind.MANUAL, None, None


TransactionSource = Annotated[
    Union[
        InvoiceSource,
        AssetDisposalSource,
        AssetDepreciationSource,
        RecurringInvoiceSource,
        ManualSource,
    ],
    Field(discriminator="kind"),
]


# --- Request Schemas ---

class TransactionEntryCreate(BaseModel):
    """One leg of a transaction. Exactly one side should be positive."""
    account_id: int
    debit_amount: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    credit_amount: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    description: str | None = Field(default=None, max_length=255)


class TransactionDraft(BaseModel):
    """
    Everything needed to create or replace a transaction.

    total_amount defaults to the sum of the debits when omitted.
    exchange_rate defaults to the registered rate of the currency.
    """
    description: str = Field(min_length=1, max_length=255)
    description_local: str | None = Field(default=None, max_length=255)
    transaction_date: date = Field(default_factory=date.today)
    transaction_type: TransactionType = TransactionType.JOURNAL
    source: TransactionSource = Field(default_factory=ManualSource)
    total_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange_rate: Decimal | None = Field(default=None, gt=0)
    cost_center_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    created_by: int | None = None
    entries: list[TransactionEntryCreate]

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.upper()


class ApproveRequest(BaseModel):
    approver_id: int


# --- Response Schemas ---

class TransactionEntryResponse(BaseModel):
    id: int
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    description: str | None

    model_config = {"from_attributes": True}


class TransactionResponse(BaseModel):
    id: int
    reference_number: str
    description: str
    description_local: str | None
    transaction_date: date
    transaction_type: TransactionType
    source_type: SourceKind
    source_id: int | None
    due_date: date | None
    total_amount: Decimal
    currency: str
    exchange_rate: Decimal
    cost_center_id: int | None
    tags: list[str] | None
    notes: str | None
    is_locked: bool
    approved_by: int | None
    approved_at: datetime | None
    created_by: int | None
    created_at: datetime
    entries: list[TransactionEntryResponse]

    model_config = {"from_attributes": True}


class BalanceDrift(BaseModel):
    account_id: int
    account_code: str
    cached_balance: Decimal
    computed_balance: Decimal


class IntegrityResponse(BaseModel):
    """Whole-ledger health check."""
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    drifted_accounts: list[BalanceDrift]
