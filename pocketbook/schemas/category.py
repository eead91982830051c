from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.transaction import TransactionType


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    transaction_type: Optional[TransactionType] = None


class CategoryCreate(CategoryCreateRequest):
    user_id: UUID


class CategoryUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    transaction_type: Optional[TransactionType]
    created_at: datetime
    updated_at: datetime
