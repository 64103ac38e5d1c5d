"""Pydantic schemas for currencies."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class CurrencyCreate(BaseModel):
    code: str = Field(min_length=3, max_length=3)
    name: str = Field(min_length=1, max_length=100)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    is_base: bool = False

    @field_validator("code")
    @classmethod
    def code_upper(cls, v: str) -> str:
        return v.upper()


class CurrencyResponse(BaseModel):
    id: int
    code: str
    name: str
    exchange_rate: Decimal
    is_base: bool

    model_config = {"from_attributes": True}
