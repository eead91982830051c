from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.allocation import Allocation, AllocationLog
from ..schemas.allocation import (
    AllocationCreate,
    AllocationUpdate,
    DistributionEntry,
    DistributionSummary,
)
from ..utils.money import ZERO, percentage_of, to_decimal
from .errors import ForbiddenError, InternalError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


async def distribute_income(
    session: AsyncSession,
    user_id: UUID,
    transaction_id: UUID,
    amount: Decimal,
) -> DistributionSummary:
    """Split an income across the user's active allocations in priority order.

    Each allocation's ideal share is its percentage of the whole income, then
    capped by what is still undistributed and by the room left under its
    target. Whatever is left over is free cash. Runs in the caller's session.
    """
    total_income = to_decimal(amount)
    remaining = total_income

    result = await session.execute(
        select(Allocation)
        .where(Allocation.user_id == user_id, Allocation.is_active.is_(True))
        .order_by(Allocation.priority.asc(), Allocation.created_at.asc(), Allocation.id.asc())
    )
    allocations = result.scalars().all()

    distributions: list[DistributionEntry] = []
    for allocation in allocations:
        if remaining <= 0:
            break

        current = to_decimal(allocation.current_amount)
        if current < 0:
            logger.error("Allocation %s holds a negative amount %s", allocation.id, current)
            raise InternalError("Allocation state is inconsistent.")

        target = allocation.target_amount
        if target is not None:
            target = to_decimal(target)
            if current >= target:
                continue

        allocated = min(percentage_of(total_income, Decimal(allocation.percentage)), remaining)
        if target is not None:
            allocated = min(allocated, target - current)
        if allocated <= 0:
            continue

        allocation.current_amount = current + allocated
        if target is not None and allocation.current_amount > target:
            logger.error("Allocation %s overshot its target %s", allocation.id, target)
            raise InternalError("Allocation state is inconsistent.")
        remaining -= allocated

        session.add(
            AllocationLog(
                user_id=user_id,
                allocation_id=allocation.id,
                transaction_id=transaction_id,
                income_amount=total_income,
                allocated_amount=allocated,
                percentage=allocation.percentage,
                priority=allocation.priority,
            )
        )
        distributions.append(
            DistributionEntry(
                allocation_id=allocation.id,
                allocation_name=allocation.name,
                allocated_amount=allocated,
                percentage=allocation.percentage,
                priority=allocation.priority,
            )
        )

    await session.flush()
    return DistributionSummary(
        total_income=total_income,
        total_distributed=total_income - remaining,
        free_cash=remaining,
        distributions=distributions,
    )


async def _get_owned(session: AsyncSession, user_id: UUID, allocation_id: UUID) -> Allocation:
    allocation = await session.get(Allocation, allocation_id)
    if allocation is None or not allocation.is_alive:
        raise NotFoundError("Allocation not found.")
    if allocation.user_id != user_id:
        raise ForbiddenError("Allocation belongs to another user.")
    return allocation


async def create_allocation(session: AsyncSession, payload: AllocationCreate) -> Allocation:
    allocation = Allocation(
        user_id=payload.user_id,
        name=payload.name,
        priority=payload.priority,
        percentage=payload.percentage,
        target_amount=to_decimal(payload.target_amount) if payload.target_amount is not None else None,
        current_amount=ZERO,
        is_active=payload.is_active,
    )
    session.add(allocation)
    await session.commit()
    await session.refresh(allocation)
    return allocation


async def list_allocations(
    session: AsyncSession, user_id: UUID, *, active_only: bool = False
) -> Sequence[Allocation]:
    stmt = select(Allocation).where(Allocation.user_id == user_id)
    if active_only:
        stmt = stmt.where(Allocation.is_active.is_(True))
    result = await session.execute(stmt.order_by(Allocation.priority.asc(), Allocation.created_at.asc()))
    return result.scalars().all()


async def get_allocation(session: AsyncSession, user_id: UUID, allocation_id: UUID) -> Allocation:
    return await _get_owned(session, user_id, allocation_id)


async def update_allocation(
    session: AsyncSession, user_id: UUID, allocation_id: UUID, payload: AllocationUpdate
) -> Allocation:
    allocation = await _get_owned(session, user_id, allocation_id)
    fields = payload.model_fields_set
    if "name" in fields and payload.name is not None:
        allocation.name = payload.name
    if "priority" in fields and payload.priority is not None:
        allocation.priority = payload.priority
    if "percentage" in fields and payload.percentage is not None:
        allocation.percentage = payload.percentage
    if "is_active" in fields and payload.is_active is not None:
        allocation.is_active = payload.is_active
    if "target_amount" in fields:
        if payload.target_amount is not None:
            target = to_decimal(payload.target_amount)
            if target < to_decimal(allocation.current_amount):
                raise InvalidInputError("Target cannot be lower than the amount already allocated.")
            allocation.target_amount = target
        else:
            allocation.target_amount = None
    await session.commit()
    await session.refresh(allocation)
    return allocation


async def delete_allocation(session: AsyncSession, user_id: UUID, allocation_id: UUID) -> None:
    allocation = await _get_owned(session, user_id, allocation_id)
    allocation.mark_deleted()
    await session.commit()


async def list_allocation_logs(
    session: AsyncSession,
    user_id: UUID,
    *,
    allocation_id: Optional[UUID] = None,
    transaction_id: Optional[UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[AllocationLog]:
    stmt = select(AllocationLog).where(AllocationLog.user_id == user_id)
    if allocation_id:
        stmt = stmt.where(AllocationLog.allocation_id == allocation_id)
    if transaction_id:
        stmt = stmt.where(AllocationLog.transaction_id == transaction_id)
    stmt = stmt.order_by(AllocationLog.created_at.desc(), AllocationLog.id.desc())
    result = await session.execute(stmt.limit(min(limit, 100)).offset(offset))
    return result.scalars().all()
