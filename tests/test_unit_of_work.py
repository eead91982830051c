from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from ledger_support import LedgerTestCase

from pocketbook.db import unit_of_work
from pocketbook.models import Pocket, PocketType
from pocketbook.services.errors import ConflictError, InvalidInputError, TransientError


class UnitOfWorkTests(LedgerTestCase):
    async def _pocket_count(self) -> int:
        return (await self.session.execute(select(func.count()).select_from(Pocket))).scalar_one()

    def _stage_pocket(self) -> None:
        self.session.add(
            Pocket(user_id=self.user.id, name="Staged", type=PocketType.ALLOCATION, balance=Decimal("1"))
        )

    async def test_numeric_overflow_is_invalid_input(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            async with unit_of_work(self.session):
                self._stage_pocket()
                raise DataError("INSERT INTO pockets ...", {}, Exception("numeric field overflow"))

        self.assertFalse(ctx.exception.retryable)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(await self._pocket_count(), 0)

    async def test_integrity_error_is_conflict(self) -> None:
        with self.assertRaises(ConflictError):
            async with unit_of_work(self.session):
                self._stage_pocket()
                raise IntegrityError("INSERT INTO pockets ...", {}, Exception("duplicate key"))

        self.assertEqual(await self._pocket_count(), 0)

    async def test_aborted_session_is_transient(self) -> None:
        with self.assertRaises(TransientError) as ctx:
            async with unit_of_work(self.session):
                self._stage_pocket()
                raise OperationalError("UPDATE pockets ...", {}, Exception("serialization failure"))

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(await self._pocket_count(), 0)

    async def test_commits_on_success(self) -> None:
        async with unit_of_work(self.session):
            self._stage_pocket()

        self.assertEqual(await self._pocket_count(), 1)
