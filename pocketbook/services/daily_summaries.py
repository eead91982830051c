"""Materialises per-user daily totals that feed the historical half of the dashboard."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import anyio
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import get_settings
from ..db import unit_of_work
from ..models.category import Category
from ..models.daily_summary import DailySummary
from ..models.transaction import Transaction, TransactionType
from ..schemas.daily_summary import DailySummaryRunReport
from ..utils.dates import day_bounds, iter_days, local_today, utcnow
from ..utils.money import ZERO, to_decimal
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
_COUNTED_TYPES = (TransactionType.INCOME, TransactionType.EXPENSE)


async def resolve_category_names(session: AsyncSession, category_ids: set[UUID]) -> dict[UUID, str]:
    """Current names for ``category_ids``, deleted categories included."""
    if not category_ids:
        return {}
    result = await session.execute(
        select(Category.id, Category.name)
        .where(Category.id.in_(category_ids))
        .execution_options(include_deleted=True)
    )
    return {row.id: row.name for row in result}


async def aggregate_by_category(
    session: AsyncSession,
    user_id: UUID,
    start: datetime,
    end: datetime,
    *,
    include_end: bool = False,
) -> list[dict[str, Any]]:
    """Sum alive income and expense transactions in the window by ``(type, category_id)``.

    The window is ``[start, end)``, or ``[start, end]`` with ``include_end``.
    """
    upper = Transaction.date <= end if include_end else Transaction.date < end
    result = await session.execute(
        select(Transaction.type, Transaction.category_id, func.sum(Transaction.amount).label("amount"))
        .where(
            Transaction.user_id == user_id,
            Transaction.type.in_(_COUNTED_TYPES),
            Transaction.date >= start,
            upper,
        )
        .group_by(Transaction.type, Transaction.category_id)
    )
    rows = result.all()
    names = await resolve_category_names(session, {row.category_id for row in rows if row.category_id})
    breakdown = [
        {
            "type": TransactionType(row.type).value,
            "category_id": str(row.category_id) if row.category_id else None,
            "category_name": names.get(row.category_id, UNCATEGORIZED) if row.category_id else UNCATEGORIZED,
            "amount": str(to_decimal(row.amount)),
        }
        for row in rows
    ]
    breakdown.sort(key=lambda entry: (entry["type"], entry["category_name"], entry["category_id"] or ""))
    return breakdown


def totals_of(breakdown: list[dict[str, Any]]) -> tuple[Decimal, Decimal]:
    income = ZERO
    expense = ZERO
    for entry in breakdown:
        if entry["type"] == TransactionType.INCOME.value:
            income += to_decimal(entry["amount"])
        else:
            expense += to_decimal(entry["amount"])
    return income, expense


async def build_daily_summary(session: AsyncSession, user_id: UUID, day: date) -> DailySummary:
    """Replace the stored summary of ``(user_id, day)`` with a fresh aggregation."""
    start, end = day_bounds(day)
    async with unit_of_work(session):
        await session.execute(
            delete(DailySummary).where(DailySummary.user_id == user_id, DailySummary.date == day)
        )
        breakdown = await aggregate_by_category(session, user_id, start, end)
        total_income, total_expense = totals_of(breakdown)
        summary = DailySummary(
            user_id=user_id,
            date=day,
            total_income=total_income,
            total_expense=total_expense,
            category_breakdown=breakdown,
        )
        session.add(summary)
    await session.refresh(summary)
    return summary


async def users_with_activity(session: AsyncSession, day: date) -> list[UUID]:
    start, end = day_bounds(day)
    result = await session.execute(
        select(Transaction.user_id)
        .where(Transaction.date >= start, Transaction.date < end)
        .distinct()
    )
    return list(result.scalars().all())


async def run_daily_summaries(
    session_factory: async_sessionmaker[AsyncSession],
    day: Optional[date] = None,
    *,
    now: Optional[datetime] = None,
) -> DailySummaryRunReport:
    """Build summaries for every user active on ``day`` (yesterday by default).

    One session per user; a failing user is logged and skipped. The whole run
    is bounded by ``DAILY_SUMMARY_TIMEOUT_SECONDS``.
    """
    settings = get_settings()
    target = day or local_today(now) - timedelta(days=1)
    report = DailySummaryRunReport(date=target)

    async with session_factory() as session:
        user_ids = await users_with_activity(session, target)
    logger.info("Building daily summaries for %s (%d users)", target, len(user_ids))

    with anyio.move_on_after(settings.daily_summary_timeout_seconds) as scope:
        for user_id in user_ids:
            try:
                async with session_factory() as session:
                    await build_daily_summary(session, user_id, target)
                report.processed += 1
            except Exception:
                logger.exception("Daily summary failed for user %s on %s", user_id, target)
                report.failed_user_ids.append(user_id)

    if scope.cancelled_caught:
        report.timed_out = True
        logger.error(
            "Daily summary run for %s stopped after %ss with %d users left",
            target,
            settings.daily_summary_timeout_seconds,
            len(user_ids) - report.processed - len(report.failed_user_ids),
        )
    else:
        logger.info(
            "Daily summaries for %s done: %d built, %d failed",
            target,
            report.processed,
            len(report.failed_user_ids),
        )
    return report


async def backfill_daily_summaries(
    session_factory: async_sessionmaker[AsyncSession],
    start: date,
    end: Optional[date] = None,
    *,
    now: Optional[datetime] = None,
) -> list[DailySummaryRunReport]:
    """Run the builder for every day in ``[start, end]``, stopping at yesterday."""
    yesterday = local_today(now or utcnow()) - timedelta(days=1)
    last = min(end or start, yesterday)
    if start > last:
        raise InvalidInputError("Backfill range must end before today.")
    return [await run_daily_summaries(session_factory, day, now=now) for day in iter_days(start, last)]


async def list_daily_summaries(
    session: AsyncSession,
    user_id: UUID,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Sequence[DailySummary]:
    stmt = select(DailySummary).where(DailySummary.user_id == user_id)
    if start:
        stmt = stmt.where(DailySummary.date >= start)
    if end:
        stmt = stmt.where(DailySummary.date <= end)
    result = await session.execute(stmt.order_by(DailySummary.date.asc()))
    return result.scalars().all()
