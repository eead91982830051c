from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.transaction import TransactionType
from .allocation import DistributionSummary


class TransactionCreateRequest(BaseModel):
    """External API payload for recording an income, expense or transfer."""

    type: TransactionType
    amount: Decimal = Field(gt=0, max_digits=16, decimal_places=2)
    currency: str = Field(default="IDR", min_length=3, max_length=3)
    date: Optional[datetime] = Field(default=None, description="Event time; defaults to now.")
    pocket_from_id: Optional[UUID] = None
    pocket_to_id: Optional[UUID] = None
    user_platform_from_id: Optional[UUID] = None
    user_platform_to_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    note: Optional[str] = Field(default=None, max_length=512)
    ref: Optional[str] = Field(default=None, max_length=128)

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: TransactionType | str) -> TransactionType:
        """Allow case-insensitive transaction types from external clients."""
        if isinstance(value, TransactionType):
            return value
        if isinstance(value, str):
            try:
                return TransactionType(value.lower())
            except ValueError as exc:
                raise ValueError("Unsupported transaction type") from exc
        raise TypeError("Transaction type must be a string or TransactionType instance")


class TransactionCreate(TransactionCreateRequest):
    """Internal payload for persisting a new transaction."""

    user_id: UUID


class TransactionRead(BaseModel):
    """API response shape for transactions."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: TransactionType
    amount: Decimal
    currency: str
    date: datetime
    pocket_from_id: Optional[UUID] = None
    pocket_to_id: Optional[UUID] = None
    user_platform_from_id: Optional[UUID] = None
    user_platform_to_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    note: Optional[str] = None
    ref: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TransactionResult(BaseModel):
    """Outcome of a successful create: the stored event and, for income, its distribution."""

    transaction: TransactionRead
    distribution: Optional[DistributionSummary] = None
