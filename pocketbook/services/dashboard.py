"""Period figures answered from stored daily summaries plus a live read of today."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.daily_summary import DailySummary
from ..models.pocket import Pocket
from ..models.transaction import TransactionType
from ..schemas.dashboard import (
    CashFlowPoint,
    CategoryChartEntry,
    DashboardCharts,
    DashboardSummary,
    TimeRange,
)
from ..utils.dates import day_start, iter_days, local_today, month_start_before, utcnow
from ..utils.money import ZERO, share_of, to_decimal
from .daily_summaries import UNCATEGORIZED, aggregate_by_category, totals_of

UNCATEGORIZED_KEY = "uncategorized"


def resolve_range(time_range: TimeRange, today: date) -> date:
    """First local day covered by ``time_range``."""
    if time_range == TimeRange.SEVEN_DAYS:
        return today - timedelta(days=7)
    if time_range == TimeRange.ONE_MONTH:
        return today.replace(day=1)
    if time_range == TimeRange.THREE_MONTHS:
        return month_start_before(today, 3)
    return today - timedelta(days=30)


@dataclass
class _Bucket:
    type: str
    category_id: Optional[str]
    category_name: str
    amount: Decimal = ZERO


@dataclass
class _Window:
    start: date
    today: date
    now: datetime
    summaries: list[DailySummary] = field(default_factory=list)
    live: list[dict[str, Any]] = field(default_factory=list)

    @property
    def historical_totals(self) -> tuple[Decimal, Decimal]:
        income = sum((to_decimal(s.total_income) for s in self.summaries), ZERO)
        expense = sum((to_decimal(s.total_expense) for s in self.summaries), ZERO)
        return income, expense


async def _load_window(session: AsyncSession, user_id: UUID, time_range: TimeRange, now: Optional[datetime]) -> _Window:
    now = now or utcnow()
    today = local_today(now)
    start = resolve_range(time_range, today)

    result = await session.execute(
        select(DailySummary)
        .where(DailySummary.user_id == user_id, DailySummary.date >= start, DailySummary.date < today)
        .order_by(DailySummary.date.asc())
    )
    live = await aggregate_by_category(session, user_id, day_start(today), now, include_end=True)
    return _Window(start=start, today=today, now=now, summaries=list(result.scalars().all()), live=live)


async def total_net_worth(session: AsyncSession, user_id: UUID) -> Decimal:
    result = await session.execute(
        select(func.coalesce(func.sum(Pocket.balance), 0)).where(
            Pocket.user_id == user_id, Pocket.is_active.is_(True)
        )
    )
    return to_decimal(result.scalar_one())


async def get_summary(
    session: AsyncSession,
    user_id: UUID,
    time_range: TimeRange = TimeRange.DEFAULT,
    *,
    now: Optional[datetime] = None,
) -> DashboardSummary:
    window = await _load_window(session, user_id, time_range, now)
    historical_income, historical_expense = window.historical_totals
    live_income, live_expense = totals_of(window.live)

    period_income = historical_income + live_income
    period_expense = historical_expense + live_expense
    return DashboardSummary(
        range=time_range,
        start=window.start,
        end=window.today,
        period_income=period_income,
        period_expense=period_expense,
        period_net=period_income - period_expense,
        total_net_worth=await total_net_worth(session, user_id),
    )


def _merge_categories(window: _Window) -> dict[tuple[str, str], _Bucket]:
    """Merge historical and live buckets by ``(type, category)``; the latest name wins."""
    buckets: dict[tuple[str, str], _Bucket] = {}
    sources = [summary.category_breakdown or [] for summary in window.summaries] + [window.live]
    for breakdown in sources:
        for entry in breakdown:
            category_id = entry.get("category_id")
            key = (entry["type"], category_id or UNCATEGORIZED_KEY)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = buckets[key] = _Bucket(
                    type=entry["type"],
                    category_id=category_id,
                    category_name=entry.get("category_name") or UNCATEGORIZED,
                )
            else:
                bucket.category_name = entry.get("category_name") or bucket.category_name
            bucket.amount += to_decimal(entry["amount"])
    return buckets


def _category_chart(buckets: dict[tuple[str, str], _Bucket], tx_type: TransactionType) -> list[CategoryChartEntry]:
    selected = [bucket for bucket in buckets.values() if bucket.type == tx_type.value]
    total = sum((bucket.amount for bucket in selected), ZERO)
    selected.sort(key=lambda bucket: (-bucket.amount, bucket.category_name))
    return [
        CategoryChartEntry(
            type=tx_type,
            category_id=bucket.category_id,
            category_name=bucket.category_name,
            amount=bucket.amount,
            percentage=share_of(bucket.amount, total),
        )
        for bucket in selected
    ]


async def get_charts(
    session: AsyncSession,
    user_id: UUID,
    time_range: TimeRange = TimeRange.DEFAULT,
    *,
    now: Optional[datetime] = None,
) -> DashboardCharts:
    window = await _load_window(session, user_id, time_range, now)

    by_day = {summary.date: summary for summary in window.summaries}
    cash_flow: list[CashFlowPoint] = []
    for day in iter_days(window.start, window.today - timedelta(days=1)):
        summary = by_day.get(day)
        income = to_decimal(summary.total_income) if summary else ZERO
        expense = to_decimal(summary.total_expense) if summary else ZERO
        cash_flow.append(CashFlowPoint(date=day, income=income, expense=expense, net=income - expense))

    live_income, live_expense = totals_of(window.live)
    cash_flow.append(
        CashFlowPoint(date=window.today, income=live_income, expense=live_expense, net=live_income - live_expense)
    )

    buckets = _merge_categories(window)
    return DashboardCharts(
        range=time_range,
        start=window.start,
        end=window.today,
        cash_flow=cash_flow,
        income_categories=_category_chart(buckets, TransactionType.INCOME),
        expense_categories=_category_chart(buckets, TransactionType.EXPENSE),
    )
