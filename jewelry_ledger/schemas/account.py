"""
Pydantic schemas for the chart of accounts.

These define the API contract. They are separate from the
database models because the API shape and the storage shape
are often different.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from jewelry_ledger.models.enums import AccountType, NormalSide


# --- Request Schemas ---

class AccountCreate(BaseModel):
    """Request to register a new account."""
    code: str = Field(min_length=1, max_length=20, pattern=r"^\d+$")
    name: str = Field(min_length=1, max_length=150)
    name_local: str | None = Field(default=None, max_length=150)
    account_type: AccountType
    subtype: str | None = Field(default=None, max_length=50)
    description: str | None = None
    parent_id: int | None = None
    currency: str = Field(default="USD", min_length=3, max_length=3)
    opening_balance: Decimal = Field(default=Decimal("0.00"), decimal_places=2)
    is_active: bool = True
    is_system: bool = False

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.upper()


class AccountUpdate(BaseModel):
    """Partial update; fields left out are not touched."""
    name: str | None = Field(default=None, min_length=1, max_length=150)
    name_local: str | None = Field(default=None, max_length=150)
    subtype: str | None = Field(default=None, max_length=50)
    description: str | None = None
    is_active: bool | None = None
    opening_balance: Decimal | None = Field(default=None, decimal_places=2)


class AccountReparent(BaseModel):
    parent_id: int | None


# --- Response Schemas ---

class AccountResponse(BaseModel):
    id: int
    code: str
    name: str
    name_local: str | None
    account_type: AccountType
    subtype: str | None
    description: str | None
    parent_id: int | None
    currency: str
    opening_balance: Decimal
    current_balance: Decimal
    normal_side: NormalSide
    is_active: bool
    is_system: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountBalanceResponse(BaseModel):
    """Balance of one account, with and without its descendants."""
    account_id: int
    account_code: str
    account_type: AccountType
    as_of: date | None
    balance: Decimal
    own_balance: Decimal
    currency: str


class AccountTreeNode(BaseModel):
    id: int
    code: str
    name: str
    account_type: AccountType
    subtype: str | None
    is_active: bool
    balance: Decimal
    children: list["AccountTreeNode"] = []
