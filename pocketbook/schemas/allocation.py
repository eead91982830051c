from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AllocationCreateRequest(BaseModel):
    name: str = Field(max_length=64)
    priority: int = Field(ge=1)
    percentage: Decimal = Field(gt=0, le=100, decimal_places=2)
    target_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=16, decimal_places=2)
    is_active: bool = True


class AllocationCreate(AllocationCreateRequest):
    user_id: UUID


class AllocationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=64)
    priority: Optional[int] = Field(default=None, ge=1)
    percentage: Optional[Decimal] = Field(default=None, gt=0, le=100, decimal_places=2)
    target_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=16, decimal_places=2)
    is_active: Optional[bool] = None


class AllocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    priority: int
    percentage: Decimal
    current_amount: Decimal
    target_amount: Optional[Decimal]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AllocationLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    allocation_id: UUID
    transaction_id: UUID
    income_amount: Decimal
    allocated_amount: Decimal
    percentage: Decimal
    priority: int
    created_at: datetime


class DistributionEntry(BaseModel):
    allocation_id: UUID
    allocation_name: str
    allocated_amount: Decimal
    percentage: Decimal
    priority: int


class DistributionSummary(BaseModel):
    """How one income was split: ``total_distributed + free_cash == total_income``."""

    total_income: Decimal
    total_distributed: Decimal
    free_cash: Decimal
    distributions: list[DistributionEntry] = Field(default_factory=list)
