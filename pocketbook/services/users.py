from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import unit_of_work
from ..models.user import User
from ..schemas.user import UserCreate
from .errors import NotFoundError
from .pockets import ensure_main_pocket


async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    """Create a user, or return the one already linked to ``payload.telegram_id``."""
    if payload.telegram_id is not None:
        existing = await get_user_by_telegram_id(session, payload.telegram_id)
        if existing:
            if payload.full_name and existing.full_name != payload.full_name:
                async with unit_of_work(session):
                    existing.full_name = payload.full_name
                await session.refresh(existing)
            await ensure_main_pocket(session, existing.id)
            return existing

    async with unit_of_work(session):
        user = User(telegram_id=payload.telegram_id, full_name=payload.full_name)
        session.add(user)
    await session.refresh(user)
    await ensure_main_pocket(session, user.id)
    return user


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def get_user(session: AsyncSession, user_id: UUID) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found.")
    return user


async def get_user_by_telegram_id(session: AsyncSession, telegram_id: int) -> Optional[User]:
    result = await session.execute(select(User).where(User.telegram_id == telegram_id))
    return result.scalars().first()
