"""Pydantic schemas for cost centers."""

from datetime import datetime

from pydantic import BaseModel, Field


class CostCenterCreate(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=150)
    name_local: str | None = Field(default=None, max_length=150)
    description: str | None = None


class CostCenterUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    name_local: str | None = Field(default=None, max_length=150)
    description: str | None = None


class CostCenterResponse(BaseModel):
    id: int
    code: str
    name: str
    name_local: str | None
    description: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
