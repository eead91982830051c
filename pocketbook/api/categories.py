from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..models.transaction import TransactionType
from ..schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from ..services import create_category, delete_category, list_categories, rename_category

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category_endpoint(payload: CategoryCreate, session: SessionDep) -> CategoryRead:
    category = await create_category(session, payload)
    return CategoryRead.model_validate(category)


@router.get("", response_model=list[CategoryRead])
async def list_categories_endpoint(
    user_id: UUID,
    session: SessionDep,
    transaction_type: Optional[TransactionType] = Query(default=None),
) -> list[CategoryRead]:
    categories = await list_categories(session, user_id, transaction_type=transaction_type)
    return [CategoryRead.model_validate(category) for category in categories]


@router.patch("/{category_id}", response_model=CategoryRead)
async def rename_category_endpoint(
    category_id: UUID, user_id: UUID, payload: CategoryUpdate, session: SessionDep
) -> CategoryRead:
    category = await rename_category(session, user_id, category_id, payload)
    return CategoryRead.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category_endpoint(category_id: UUID, user_id: UUID, session: SessionDep) -> Response:
    await delete_category(session, user_id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
