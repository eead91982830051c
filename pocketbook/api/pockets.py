from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..models.pocket import PocketType
from ..schemas.pocket import PocketCreate, PocketRead, PocketUpdate
from ..services import create_pocket, delete_pocket, get_pocket, list_pockets, update_pocket

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=PocketRead, status_code=status.HTTP_201_CREATED)
async def create_pocket_endpoint(payload: PocketCreate, session: SessionDep) -> PocketRead:
    pocket = await create_pocket(session, payload)
    return PocketRead.model_validate(pocket)


@router.get("", response_model=list[PocketRead])
async def list_pockets_endpoint(
    user_id: UUID,
    session: SessionDep,
    pocket_type: Optional[PocketType] = Query(default=None, alias="type"),
) -> list[PocketRead]:
    pockets = await list_pockets(session, user_id, pocket_type=pocket_type)
    return [PocketRead.model_validate(pocket) for pocket in pockets]


@router.get("/{pocket_id}", response_model=PocketRead)
async def get_pocket_endpoint(pocket_id: UUID, user_id: UUID, session: SessionDep) -> PocketRead:
    pocket = await get_pocket(session, user_id, pocket_id)
    return PocketRead.model_validate(pocket)


@router.patch("/{pocket_id}", response_model=PocketRead)
async def update_pocket_endpoint(
    pocket_id: UUID, user_id: UUID, payload: PocketUpdate, session: SessionDep
) -> PocketRead:
    pocket = await update_pocket(session, user_id, pocket_id, payload)
    return PocketRead.model_validate(pocket)


@router.delete("/{pocket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pocket_endpoint(pocket_id: UUID, user_id: UUID, session: SessionDep) -> Response:
    await delete_pocket(session, user_id, pocket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
