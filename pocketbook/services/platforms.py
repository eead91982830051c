from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import unit_of_work
from ..models.platform import Platform, UserPlatform
from ..schemas.platform import PlatformCreate, UserPlatformCreate, UserPlatformUpdate
from ..utils.money import ZERO
from .errors import ForbiddenError, InvalidInputError, NotFoundError


async def create_platform(session: AsyncSession, payload: PlatformCreate) -> Platform:
    async with unit_of_work(session):
        platform = Platform(name=payload.name, type=payload.type, is_active=payload.is_active)
        session.add(platform)
    await session.refresh(platform)
    return platform


async def list_platforms(session: AsyncSession, *, active_only: bool = True) -> Sequence[Platform]:
    stmt = select(Platform)
    if active_only:
        stmt = stmt.where(Platform.is_active.is_(True))
    result = await session.execute(stmt.order_by(Platform.name.asc()))
    return result.scalars().all()


async def create_user_platform(session: AsyncSession, payload: UserPlatformCreate) -> UserPlatform:
    platform = await session.get(Platform, payload.platform_id)
    if platform is None or not platform.is_alive:
        raise NotFoundError("Platform not found.")
    if not platform.is_active:
        raise InvalidInputError(f"Platform '{platform.name}' is inactive.")

    async with unit_of_work(session):
        user_platform = UserPlatform(
            user_id=payload.user_id,
            platform_id=platform.id,
            alias_name=payload.alias_name,
            balance=ZERO,
        )
        session.add(user_platform)
    await session.refresh(user_platform)
    return user_platform


async def list_user_platforms(session: AsyncSession, user_id: UUID) -> Sequence[UserPlatform]:
    result = await session.execute(
        select(UserPlatform).where(UserPlatform.user_id == user_id).order_by(UserPlatform.created_at.asc())
    )
    return result.scalars().all()


async def get_user_platform(session: AsyncSession, user_id: UUID, user_platform_id: UUID) -> UserPlatform:
    user_platform = await session.get(UserPlatform, user_platform_id)
    if user_platform is None or not user_platform.is_alive:
        raise NotFoundError("User platform not found.")
    if user_platform.user_id != user_id:
        raise ForbiddenError("User platform belongs to another user.")
    return user_platform


async def update_user_platform(
    session: AsyncSession, user_id: UUID, user_platform_id: UUID, payload: UserPlatformUpdate
) -> UserPlatform:
    user_platform = await get_user_platform(session, user_id, user_platform_id)
    fields = payload.model_fields_set
    async with unit_of_work(session):
        if "alias_name" in fields:
            user_platform.alias_name = payload.alias_name
        if "is_active" in fields and payload.is_active is not None:
            user_platform.is_active = payload.is_active
    await session.refresh(user_platform)
    return user_platform


async def delete_user_platform(session: AsyncSession, user_id: UUID, user_platform_id: UUID) -> None:
    user_platform = await get_user_platform(session, user_id, user_platform_id)
    async with unit_of_work(session):
        user_platform.mark_deleted()
