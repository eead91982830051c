from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.transaction import TransactionType


class TimeRange(str, Enum):
    SEVEN_DAYS = "7d"
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    DEFAULT = "default"


class DashboardSummary(BaseModel):
    range: TimeRange
    start: dt.date
    end: dt.date
    period_income: Decimal
    period_expense: Decimal
    period_net: Decimal
    total_net_worth: Decimal


class CashFlowPoint(BaseModel):
    date: dt.date
    income: Decimal
    expense: Decimal
    net: Decimal


class CategoryChartEntry(BaseModel):
    type: TransactionType
    category_id: Optional[UUID] = None
    category_name: str
    amount: Decimal
    percentage: Decimal


class DashboardCharts(BaseModel):
    range: TimeRange
    start: dt.date
    end: dt.date
    cash_flow: list[CashFlowPoint] = Field(default_factory=list)
    income_categories: list[CategoryChartEntry] = Field(default_factory=list)
    expense_categories: list[CategoryChartEntry] = Field(default_factory=list)
