from __future__ import annotations

from collections.abc import Sequence
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import unit_of_work
from ..models.category import Category
from ..models.transaction import TransactionType
from ..schemas.category import CategoryCreate, CategoryUpdate
from .errors import ForbiddenError, NotFoundError


async def create_category(session: AsyncSession, payload: CategoryCreate) -> Category:
    async with unit_of_work(session):
        category = Category(
            user_id=payload.user_id,
            name=payload.name.strip(),
            transaction_type=payload.transaction_type,
        )
        session.add(category)
    await session.refresh(category)
    return category


async def list_categories(
    session: AsyncSession, user_id: UUID, *, transaction_type: Optional[TransactionType] = None
) -> Sequence[Category]:
    stmt = select(Category).where(Category.user_id == user_id)
    if transaction_type:
        stmt = stmt.where(
            or_(Category.transaction_type == transaction_type, Category.transaction_type.is_(None))
        )
    result = await session.execute(stmt.order_by(Category.name.asc()))
    return result.scalars().all()


async def get_category(session: AsyncSession, user_id: UUID, category_id: UUID) -> Category:
    category = await session.get(Category, category_id)
    if category is None or not category.is_alive:
        raise NotFoundError("Category not found.")
    if category.user_id != user_id:
        raise ForbiddenError("Category belongs to another user.")
    return category


async def rename_category(
    session: AsyncSession, user_id: UUID, category_id: UUID, payload: CategoryUpdate
) -> Category:
    """Rename a category. Stored daily summaries keep the name they were built with."""
    category = await get_category(session, user_id, category_id)
    async with unit_of_work(session):
        category.name = payload.name.strip()
    await session.refresh(category)
    return category


async def delete_category(session: AsyncSession, user_id: UUID, category_id: UUID) -> None:
    category = await get_category(session, user_id, category_id)
    async with unit_of_work(session):
        category.mark_deleted()
