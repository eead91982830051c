from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.transaction import TransactionType


class CategoryAmount(BaseModel):
    type: TransactionType
    category_id: Optional[UUID] = None
    category_name: str
    amount: Decimal


class DailySummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    date: dt.date
    total_income: Decimal
    total_expense: Decimal
    category_breakdown: list[CategoryAmount]
    created_at: dt.datetime


class DailySummaryRebuildRequest(BaseModel):
    start: dt.date
    end: Optional[dt.date] = Field(default=None, description="Inclusive; defaults to ``start``.")


class DailySummaryRunReport(BaseModel):
    """Outcome of one builder run over a single day."""

    date: dt.date
    processed: int = 0
    failed_user_ids: list[UUID] = Field(default_factory=list)
    timed_out: bool = False
