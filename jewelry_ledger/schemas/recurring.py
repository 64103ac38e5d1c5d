"""Pydantic schemas for recurring transaction templates."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from jewelry_ledger.models.enums import RecurrenceFrequency
from jewelry_ledger.schemas.transaction import (
    TransactionEntryCreate,
    TransactionResponse,
)


class RecurringTransactionCreate(BaseModel):
    """
    A schedule plus the transaction it posts each time.

    The entries go through the same double-entry checks as a
    manual transaction when the template is registered.
    """
    name: str = Field(min_length=1, max_length=150)
    name_local: str | None = Field(default=None, max_length=150)
    description: str | None = Field(default=None, max_length=255)
    description_local: str | None = Field(default=None, max_length=255)
    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1)
    start_date: date
    end_date: date | None = None
    max_occurrences: int | None = Field(default=None, ge=1)
    total_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange_rate: Decimal | None = Field(default=None, gt=0)
    cost_center_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    entries: list[TransactionEntryCreate]

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RecurringTransactionResponse(BaseModel):
    id: int
    name: str
    name_local: str | None
    description: str | None
    description_local: str | None
    frequency: RecurrenceFrequency
    interval: int
    start_date: date
    end_date: date | None
    next_run_date: date
    max_occurrences: int | None
    occurrences_count: int
    is_active: bool
    template: dict
    tags: list[str] | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RecurringRunFailure(BaseModel):
    template_id: int
    error: str


class RecurringRunResponse(BaseModel):
    """Outcome of one pass over the due templates."""
    run_date: date
    posted: list[TransactionResponse]
    failures: list[RecurringRunFailure]
