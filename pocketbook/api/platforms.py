from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.platform import PlatformCreate, PlatformRead
from ..services import create_platform, list_platforms

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=PlatformRead, status_code=status.HTTP_201_CREATED)
async def create_platform_endpoint(payload: PlatformCreate, session: SessionDep) -> PlatformRead:
    platform = await create_platform(session, payload)
    return PlatformRead.model_validate(platform)


@router.get("", response_model=list[PlatformRead])
async def list_platforms_endpoint(session: SessionDep, active_only: bool = True) -> list[PlatformRead]:
    platforms = await list_platforms(session, active_only=active_only)
    return [PlatformRead.model_validate(platform) for platform in platforms]
