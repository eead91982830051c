from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.platform import PlatformType


class PlatformCreate(BaseModel):
    name: str = Field(max_length=64)
    type: PlatformType
    is_active: bool = True


class PlatformRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: PlatformType
    is_active: bool
    created_at: datetime


class UserPlatformCreateRequest(BaseModel):
    platform_id: UUID
    alias_name: Optional[str] = Field(default=None, max_length=64)


class UserPlatformCreate(UserPlatformCreateRequest):
    user_id: UUID


class UserPlatformUpdate(BaseModel):
    alias_name: Optional[str] = Field(default=None, max_length=64)
    is_active: Optional[bool] = None


class UserPlatformRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    platform_id: UUID
    alias_name: Optional[str]
    balance: Decimal
    is_active: bool
    last_use_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
