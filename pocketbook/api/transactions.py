from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..models.transaction import TransactionType
from ..schemas.transaction import TransactionCreate, TransactionRead, TransactionResult
from ..services import cancel_transaction, create_transaction, get_transaction, list_transactions

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=TransactionResult, status_code=status.HTTP_201_CREATED)
async def create_transaction_endpoint(
    payload: TransactionCreate,
    session: SessionDep,
) -> TransactionResult:
    return await create_transaction(session, payload)


@router.get("", response_model=list[TransactionRead])
async def list_transactions_endpoint(
    session: SessionDep,
    user_id: UUID,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    transaction_type: Optional[TransactionType] = Query(default=None),
    category_id: Optional[UUID] = Query(default=None),
    pocket_id: Optional[UUID] = Query(default=None),
    user_platform_id: Optional[UUID] = Query(default=None),
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
) -> list[TransactionRead]:
    transactions = await list_transactions(
        session,
        user_id,
        limit=limit,
        offset=offset,
        transaction_type=transaction_type,
        category_id=category_id,
        pocket_id=pocket_id,
        user_platform_id=user_platform_id,
        start=start,
        end=end,
    )
    return [TransactionRead.model_validate(tx) for tx in transactions]


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction_endpoint(transaction_id: UUID, user_id: UUID, session: SessionDep) -> TransactionRead:
    transaction = await get_transaction(session, user_id, transaction_id)
    return TransactionRead.model_validate(transaction)


@router.delete("/{transaction_id}", response_model=TransactionRead)
async def cancel_transaction_endpoint(
    transaction_id: UUID, user_id: UUID, session: SessionDep
) -> TransactionRead:
    transaction = await cancel_transaction(session, user_id, transaction_id)
    return TransactionRead.model_validate(transaction)
