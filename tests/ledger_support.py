"""Shared in-memory SQLite ledger for service-level tests."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest import IsolatedAsyncioTestCase
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pocketbook.models import (
    Allocation,
    Base,
    Category,
    Platform,
    PlatformType,
    Pocket,
    PocketType,
    TransactionType,
    User,
    UserPlatform,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class LedgerTestCase(IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        self.session = self.session_factory()
        self.user = await self.make_user()

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.engine.dispose()

    async def _store(self, entity):
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def make_user(self, telegram_id: int | None = None) -> User:
        return await self._store(User(telegram_id=telegram_id, full_name="Test User"))

    async def make_pocket(
        self,
        name: str = "Pocket",
        *,
        balance: str = "0",
        pocket_type: PocketType = PocketType.ALLOCATION,
        user_id: UUID | None = None,
        is_locked: bool = False,
        is_active: bool = True,
    ) -> Pocket:
        return await self._store(
            Pocket(
                user_id=user_id or self.user.id,
                name=name,
                type=pocket_type,
                balance=Decimal(balance),
                is_locked=is_locked,
                is_active=is_active,
                is_default=pocket_type == PocketType.MAIN,
            )
        )

    async def make_user_platform(
        self,
        alias: str = "Bank",
        *,
        balance: str = "0",
        user_id: UUID | None = None,
        is_active: bool = True,
    ) -> UserPlatform:
        platform = await self._store(Platform(name=f"{alias} platform", type=PlatformType.BANK))
        return await self._store(
            UserPlatform(
                user_id=user_id or self.user.id,
                platform_id=platform.id,
                alias_name=alias,
                balance=Decimal(balance),
                is_active=is_active,
            )
        )

    async def make_allocation(
        self,
        name: str,
        *,
        priority: int,
        percentage: str,
        target: str | None = None,
        current: str = "0",
        is_active: bool = True,
    ) -> Allocation:
        return await self._store(
            Allocation(
                user_id=self.user.id,
                name=name,
                priority=priority,
                percentage=Decimal(percentage),
                target_amount=Decimal(target) if target is not None else None,
                current_amount=Decimal(current),
                is_active=is_active,
            )
        )

    async def make_category(self, name: str, transaction_type: TransactionType | None = None) -> Category:
        return await self._store(Category(user_id=self.user.id, name=name, transaction_type=transaction_type))

    async def reload(self, entity):
        await self.session.refresh(entity)
        return entity
