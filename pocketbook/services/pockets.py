from __future__ import annotations

from collections.abc import Sequence
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import unit_of_work
from ..models.pocket import Pocket, PocketType
from ..models.user import User
from ..schemas.pocket import PocketCreate, PocketUpdate
from ..utils.money import ZERO, to_decimal
from .errors import ConflictError, ForbiddenError, NotFoundError

MAIN_POCKET_NAME = "Main Pocket"


async def get_main_pocket(session: AsyncSession, user_id: UUID) -> Optional[Pocket]:
    result = await session.execute(
        select(Pocket).where(Pocket.user_id == user_id, Pocket.type == PocketType.MAIN)
    )
    return result.scalars().first()


async def ensure_main_pocket(session: AsyncSession, user_id: UUID) -> Pocket:
    """Return the user's main pocket, creating it on first use."""
    pocket = await get_main_pocket(session, user_id)
    if pocket:
        return pocket

    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found.")
    async with unit_of_work(session):
        pocket = Pocket(
            user_id=user_id,
            name=MAIN_POCKET_NAME,
            type=PocketType.MAIN,
            balance=ZERO,
            is_default=True,
        )
        session.add(pocket)
    await session.refresh(pocket)
    return pocket


async def create_pocket(session: AsyncSession, payload: PocketCreate) -> Pocket:
    if payload.type == PocketType.MAIN and await get_main_pocket(session, payload.user_id):
        raise ConflictError("User already has a main pocket.")

    async with unit_of_work(session):
        pocket = Pocket(
            user_id=payload.user_id,
            name=payload.name,
            type=payload.type,
            category_id=payload.category_id,
            balance=ZERO,
            target_balance=to_decimal(payload.target_balance) if payload.target_balance is not None else None,
            is_active=payload.is_active,
            is_default=payload.type == PocketType.MAIN,
            is_locked=payload.type == PocketType.SYSTEM,
        )
        session.add(pocket)
    await session.refresh(pocket)
    return pocket


async def list_pockets(
    session: AsyncSession, user_id: UUID, *, pocket_type: Optional[PocketType] = None
) -> Sequence[Pocket]:
    stmt = select(Pocket).where(Pocket.user_id == user_id)
    if pocket_type:
        stmt = stmt.where(Pocket.type == pocket_type)
    result = await session.execute(stmt.order_by(Pocket.is_default.desc(), Pocket.created_at.asc()))
    return result.scalars().all()


async def get_pocket(session: AsyncSession, user_id: UUID, pocket_id: UUID) -> Pocket:
    pocket = await session.get(Pocket, pocket_id)
    if pocket is None or not pocket.is_alive:
        raise NotFoundError("Pocket not found.")
    if pocket.user_id != user_id:
        raise ForbiddenError("Pocket belongs to another user.")
    return pocket


async def update_pocket(
    session: AsyncSession, user_id: UUID, pocket_id: UUID, payload: PocketUpdate
) -> Pocket:
    """Edit pocket metadata. The balance is never writable here."""
    pocket = await get_pocket(session, user_id, pocket_id)
    if pocket.is_locked:
        raise ForbiddenError(f"Pocket '{pocket.name}' is locked.")

    fields = payload.model_fields_set
    if pocket.type == PocketType.MAIN:
        if "name" in fields and payload.name is not None and payload.name != pocket.name:
            raise ForbiddenError("The main pocket cannot be renamed.")
        if "type" in fields and payload.type not in (None, PocketType.MAIN):
            raise ForbiddenError("The main pocket cannot change type.")
    elif "type" in fields and payload.type == PocketType.MAIN:
        raise ConflictError("A pocket cannot be promoted to main.")

    async with unit_of_work(session):
        if "name" in fields and payload.name is not None:
            pocket.name = payload.name
        if "type" in fields and payload.type is not None:
            pocket.type = payload.type
            pocket.is_locked = payload.type == PocketType.SYSTEM
        if "category_id" in fields:
            pocket.category_id = payload.category_id
        if "target_balance" in fields:
            pocket.target_balance = (
                to_decimal(payload.target_balance) if payload.target_balance is not None else None
            )
        if "is_active" in fields and payload.is_active is not None:
            pocket.is_active = payload.is_active
    await session.refresh(pocket)
    return pocket


async def delete_pocket(session: AsyncSession, user_id: UUID, pocket_id: UUID) -> None:
    pocket = await get_pocket(session, user_id, pocket_id)
    if pocket.type == PocketType.MAIN:
        raise ForbiddenError("The main pocket cannot be deleted.")
    if pocket.is_locked:
        raise ForbiddenError(f"Pocket '{pocket.name}' is locked.")
    async with unit_of_work(session):
        pocket.mark_deleted()
