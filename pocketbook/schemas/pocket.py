from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.pocket import PocketType


class PocketCreateRequest(BaseModel):
    name: str = Field(max_length=64)
    type: PocketType = Field(default=PocketType.ALLOCATION)
    category_id: Optional[UUID] = None
    target_balance: Optional[Decimal] = Field(default=None, ge=0, max_digits=16, decimal_places=2)
    is_active: bool = True


class PocketCreate(PocketCreateRequest):
    user_id: UUID


class PocketUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=64)
    type: Optional[PocketType] = None
    category_id: Optional[UUID] = None
    target_balance: Optional[Decimal] = Field(default=None, ge=0, max_digits=16, decimal_places=2)
    is_active: Optional[bool] = None


class PocketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    type: PocketType
    category_id: Optional[UUID]
    balance: Decimal
    target_balance: Optional[Decimal]
    is_default: bool
    is_active: bool
    is_locked: bool
    last_use_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
