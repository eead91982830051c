from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.platform import UserPlatformCreate, UserPlatformRead, UserPlatformUpdate
from ..services import create_user_platform, delete_user_platform, list_user_platforms, update_user_platform

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=UserPlatformRead, status_code=status.HTTP_201_CREATED)
async def create_user_platform_endpoint(payload: UserPlatformCreate, session: SessionDep) -> UserPlatformRead:
    user_platform = await create_user_platform(session, payload)
    return UserPlatformRead.model_validate(user_platform)


@router.get("", response_model=list[UserPlatformRead])
async def list_user_platforms_endpoint(user_id: UUID, session: SessionDep) -> list[UserPlatformRead]:
    user_platforms = await list_user_platforms(session, user_id)
    return [UserPlatformRead.model_validate(item) for item in user_platforms]


@router.patch("/{user_platform_id}", response_model=UserPlatformRead)
async def update_user_platform_endpoint(
    user_platform_id: UUID, user_id: UUID, payload: UserPlatformUpdate, session: SessionDep
) -> UserPlatformRead:
    user_platform = await update_user_platform(session, user_id, user_platform_id, payload)
    return UserPlatformRead.model_validate(user_platform)


@router.delete("/{user_platform_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_platform_endpoint(user_platform_id: UUID, user_id: UUID, session: SessionDep) -> Response:
    await delete_user_platform(session, user_id, user_platform_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
