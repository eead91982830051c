"""The only code path that writes ``balance`` on pockets and user platforms.

``apply_transaction`` and ``revert_transaction`` run inside the caller's
session: they read and mutate the referenced rows and flush, but never commit.
The session's isolation level is what keeps concurrent writers on the same
pocket consistent.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.platform import UserPlatform
from ..models.pocket import Pocket
from ..models.transaction import TransactionType
from ..utils.dates import utcnow
from ..utils.money import to_decimal
from .errors import InvalidInputError, InvalidShapeError, NotFoundError

Account = Union[Pocket, UserPlatform]


def validate_event_shape(
    tx_type: TransactionType,
    pocket_from_id: Optional[UUID] = None,
    pocket_to_id: Optional[UUID] = None,
    user_platform_from_id: Optional[UUID] = None,
    user_platform_to_id: Optional[UUID] = None,
) -> None:
    """Raise :class:`InvalidShapeError` unless the from/to fields fit ``tx_type``."""
    has_from = pocket_from_id is not None or user_platform_from_id is not None
    has_to = pocket_to_id is not None or user_platform_to_id is not None

    if tx_type == TransactionType.INCOME:
        if has_from:
            raise InvalidShapeError("Income cannot reference a source pocket or platform.")
        if not has_to:
            raise InvalidShapeError("Income needs a destination pocket or platform.")
        return

    if tx_type == TransactionType.EXPENSE:
        if has_to:
            raise InvalidShapeError("Expense cannot reference a destination pocket or platform.")
        if not has_from:
            raise InvalidShapeError("Expense needs a source pocket or platform.")
        return

    if tx_type == TransactionType.TRANSFER:
        pockets = (pocket_from_id is not None, pocket_to_id is not None)
        platforms = (user_platform_from_id is not None, user_platform_to_id is not None)
        if pockets in {(True, True), (False, False)} and platforms in {(True, True), (False, False)}:
            if any(pockets) or any(platforms):
                return
        raise InvalidShapeError(
            "Transfer must move between two pockets, two platforms, or both pairs at once."
        )

    raise InvalidShapeError(f"Unsupported transaction type '{tx_type}'.")


async def _load(session: AsyncSession, model: type[Account], entity_id: Optional[UUID]) -> Optional[Account]:
    if entity_id is None:
        return None
    entity = await session.get(model, entity_id)
    if entity is None or not entity.is_alive:
        raise NotFoundError(f"{model.__name__} {entity_id} not found.")
    return entity


def _shift(entity: Optional[Account], delta: Decimal, now: datetime) -> None:
    if entity is None:
        return
    entity.balance = to_decimal(entity.balance) + delta
    entity.last_use_at = now


def _check_amount(amount: Decimal) -> Decimal:
    value = to_decimal(amount)
    if value <= 0:
        raise InvalidInputError("Amount must be greater than zero.")
    return value


async def _move(
    session: AsyncSession,
    amount: Decimal,
    *,
    pocket_from_id: Optional[UUID],
    pocket_to_id: Optional[UUID],
    user_platform_from_id: Optional[UUID],
    user_platform_to_id: Optional[UUID],
    now: datetime,
) -> None:
    """Subtract ``amount`` from every ``*_from`` and add it to every ``*_to``."""
    pocket_from = await _load(session, Pocket, pocket_from_id)
    pocket_to = await _load(session, Pocket, pocket_to_id)
    platform_from = await _load(session, UserPlatform, user_platform_from_id)
    platform_to = await _load(session, UserPlatform, user_platform_to_id)

    _shift(pocket_from, -amount, now)
    _shift(pocket_to, amount, now)
    _shift(platform_from, -amount, now)
    _shift(platform_to, amount, now)
    await session.flush()


async def apply_transaction(
    session: AsyncSession,
    tx_type: TransactionType,
    amount: Decimal,
    *,
    pocket_from_id: Optional[UUID] = None,
    pocket_to_id: Optional[UUID] = None,
    user_platform_from_id: Optional[UUID] = None,
    user_platform_to_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> None:
    """Apply the balance deltas of one event.

    Income credits every destination, expense debits every source and a
    transfer does both. No sufficiency check is made here.
    """
    value = _check_amount(amount)
    validate_event_shape(tx_type, pocket_from_id, pocket_to_id, user_platform_from_id, user_platform_to_id)
    await _move(
        session,
        value,
        pocket_from_id=pocket_from_id,
        pocket_to_id=pocket_to_id,
        user_platform_from_id=user_platform_from_id,
        user_platform_to_id=user_platform_to_id,
        now=now or utcnow(),
    )


async def revert_transaction(
    session: AsyncSession,
    tx_type: TransactionType,
    amount: Decimal,
    *,
    pocket_from_id: Optional[UUID] = None,
    pocket_to_id: Optional[UUID] = None,
    user_platform_from_id: Optional[UUID] = None,
    user_platform_to_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> None:
    """Undo :func:`apply_transaction` for the same arguments by swapping sources and destinations."""
    value = _check_amount(amount)
    validate_event_shape(tx_type, pocket_from_id, pocket_to_id, user_platform_from_id, user_platform_to_id)
    await _move(
        session,
        value,
        pocket_from_id=pocket_to_id,
        pocket_to_id=pocket_from_id,
        user_platform_from_id=user_platform_to_id,
        user_platform_to_id=user_platform_from_id,
        now=now or utcnow(),
    )
