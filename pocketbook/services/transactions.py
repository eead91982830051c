from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..db import unit_of_work
from ..models.category import Category
from ..models.platform import UserPlatform
from ..models.pocket import Pocket, PocketType
from ..models.transaction import Transaction, TransactionType
from ..schemas.allocation import DistributionSummary
from ..schemas.transaction import TransactionCreate, TransactionRead, TransactionResult
from ..utils.dates import as_utc, local_date, local_today, utcnow
from ..utils.money import to_decimal
from .allocations import distribute_income
from .balances import apply_transaction, revert_transaction, validate_event_shape
from .errors import ForbiddenError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


async def _owned_pocket(session: AsyncSession, user_id: UUID, pocket_id: Optional[UUID]) -> Optional[Pocket]:
    if pocket_id is None:
        return None
    pocket = await session.get(Pocket, pocket_id)
    if pocket is None or not pocket.is_alive:
        raise NotFoundError("Pocket not found.")
    if pocket.user_id != user_id:
        raise ForbiddenError("Pocket belongs to another user.")
    if not pocket.is_active:
        raise InvalidInputError(f"Pocket '{pocket.name}' is inactive.")
    return pocket


async def _owned_platform(
    session: AsyncSession, user_id: UUID, user_platform_id: Optional[UUID]
) -> Optional[UserPlatform]:
    if user_platform_id is None:
        return None
    user_platform = await session.get(UserPlatform, user_platform_id)
    if user_platform is None or not user_platform.is_alive:
        raise NotFoundError("User platform not found.")
    if user_platform.user_id != user_id:
        raise ForbiddenError("User platform belongs to another user.")
    if not user_platform.is_active:
        raise InvalidInputError("User platform is inactive.")
    return user_platform


async def _check_category(session: AsyncSession, user_id: UUID, category_id: Optional[UUID]) -> None:
    if category_id is None:
        return
    category = await session.get(Category, category_id)
    if category is None or not category.is_alive:
        raise NotFoundError("Category not found.")
    if category.user_id != user_id:
        raise ForbiddenError("Category belongs to another user.")


async def _validate(session: AsyncSession, payload: TransactionCreate, amount: Decimal, elevated: bool) -> None:
    pocket_from = await _owned_pocket(session, payload.user_id, payload.pocket_from_id)
    pocket_to = await _owned_pocket(session, payload.user_id, payload.pocket_to_id)
    platform_from = await _owned_platform(session, payload.user_id, payload.user_platform_from_id)
    await _owned_platform(session, payload.user_id, payload.user_platform_to_id)
    await _check_category(session, payload.user_id, payload.category_id)

    if elevated:
        return

    for pocket in (pocket_from, pocket_to):
        if pocket is not None and pocket.is_locked:
            raise ForbiddenError(f"Pocket '{pocket.name}' is locked.")

    same_pocket = payload.pocket_from_id is not None and payload.pocket_from_id == payload.pocket_to_id
    if pocket_from is not None and pocket_from.type != PocketType.DEBT and not same_pocket:
        if to_decimal(pocket_from.balance) < amount:
            raise InvalidInputError(f"Insufficient balance in pocket '{pocket_from.name}'.")
    same_platform = (
        payload.user_platform_from_id is not None
        and payload.user_platform_from_id == payload.user_platform_to_id
    )
    if platform_from is not None and not same_platform:
        if to_decimal(platform_from.balance) < amount:
            raise InvalidInputError("Insufficient balance in user platform.")


def _event_refs(source: TransactionCreate | Transaction) -> dict[str, Optional[UUID]]:
    return {
        "pocket_from_id": source.pocket_from_id,
        "pocket_to_id": source.pocket_to_id,
        "user_platform_from_id": source.user_platform_from_id,
        "user_platform_to_id": source.user_platform_to_id,
    }


async def _refresh_past_summary(session: AsyncSession, transaction: Transaction, now: datetime) -> None:
    """Rebuild the stored summary of a past day touched by ``transaction``; never raises."""
    if not get_settings().refresh_past_summaries:
        return
    day = local_date(transaction.date)
    if day >= local_today(now):
        return
    from .daily_summaries import build_daily_summary

    try:
        await build_daily_summary(session, transaction.user_id, day)
    except Exception:
        logger.exception(
            "Failed to refresh daily summary for user %s on %s", transaction.user_id, day
        )


async def create_transaction(
    session: AsyncSession,
    payload: TransactionCreate,
    *,
    elevated: bool = False,
    now: Optional[datetime] = None,
) -> TransactionResult:
    """Validate, persist and apply one event; on income also distribute it.

    ``elevated`` marks system callers allowed to move money through locked
    pockets and to overdraw.
    """
    now = now or utcnow()
    try:
        amount = to_decimal(payload.amount)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc
    if amount != payload.amount:
        raise InvalidInputError("Amount cannot have more than two decimal places.")
    if amount <= 0:
        raise InvalidInputError("Amount must be greater than zero.")
    refs = _event_refs(payload)
    validate_event_shape(payload.type, **refs)
    await _validate(session, payload, amount, elevated)

    distribution: Optional[DistributionSummary] = None
    async with unit_of_work(session):
        transaction = Transaction(
            user_id=payload.user_id,
            type=payload.type,
            amount=amount,
            currency=payload.currency.upper(),
            date=as_utc(payload.date) if payload.date else now,
            category_id=payload.category_id,
            note=payload.note,
            ref=payload.ref,
            **refs,
        )
        session.add(transaction)
        await session.flush()
        await apply_transaction(session, payload.type, amount, now=now, **refs)
        if payload.type == TransactionType.INCOME:
            distribution = await distribute_income(session, payload.user_id, transaction.id, amount)

    await session.refresh(transaction)
    logger.info(
        "Recorded %s %s for user %s (%s)", payload.type.value, amount, payload.user_id, transaction.id
    )
    result = TransactionResult(
        transaction=TransactionRead.model_validate(transaction),
        distribution=distribution,
    )
    await _refresh_past_summary(session, transaction, now)
    return result


async def cancel_transaction(
    session: AsyncSession,
    user_id: UUID,
    transaction_id: UUID,
    *,
    now: Optional[datetime] = None,
) -> Transaction:
    """Soft-delete a transaction and revert its balance effect.

    Allocation logs and allocation amounts written for an income stay as they are.
    """
    now = now or utcnow()
    transaction = await get_transaction(session, user_id, transaction_id)
    async with unit_of_work(session):
        transaction.mark_deleted(now)
        await revert_transaction(
            session, transaction.type, transaction.amount, now=now, **_event_refs(transaction)
        )
    await session.refresh(transaction)
    logger.info("Cancelled transaction %s for user %s", transaction.id, user_id)
    await _refresh_past_summary(session, transaction, now)
    return transaction


async def get_transaction(session: AsyncSession, user_id: UUID, transaction_id: UUID) -> Transaction:
    transaction = await session.get(Transaction, transaction_id)
    if transaction is None or not transaction.is_alive:
        raise NotFoundError("Transaction not found.")
    if transaction.user_id != user_id:
        raise ForbiddenError("Transaction belongs to another user.")
    return transaction


async def list_transactions(
    session: AsyncSession,
    user_id: UUID,
    *,
    limit: int = 50,
    offset: int = 0,
    transaction_type: Optional[TransactionType] = None,
    category_id: Optional[UUID] = None,
    pocket_id: Optional[UUID] = None,
    user_platform_id: Optional[UUID] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Sequence[Transaction]:
    """Alive transactions of one user, newest first."""
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidInputError(f"limit must be between 1 and {MAX_PAGE_SIZE}.")
    if offset < 0:
        raise InvalidInputError("offset cannot be negative.")

    stmt: Select[tuple[Transaction]] = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    if transaction_type:
        stmt = stmt.where(Transaction.type == transaction_type)
    if category_id:
        stmt = stmt.where(Transaction.category_id == category_id)
    if pocket_id:
        stmt = stmt.where(or_(Transaction.pocket_from_id == pocket_id, Transaction.pocket_to_id == pocket_id))
    if user_platform_id:
        stmt = stmt.where(
            or_(
                Transaction.user_platform_from_id == user_platform_id,
                Transaction.user_platform_to_id == user_platform_id,
            )
        )
    if start:
        stmt = stmt.where(Transaction.date >= as_utc(start))
    if end:
        stmt = stmt.where(Transaction.date < as_utc(end))
    result = await session.execute(stmt.limit(limit).offset(offset))
    return result.scalars().all()
