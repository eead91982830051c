from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.dashboard import DashboardCharts, DashboardSummary, TimeRange
from ..services import get_charts, get_summary

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary_endpoint(
    user_id: UUID,
    session: SessionDep,
    range: Annotated[TimeRange, Query()] = TimeRange.DEFAULT,
) -> DashboardSummary:
    return await get_summary(session, user_id, range)


@router.get("/charts", response_model=DashboardCharts)
async def dashboard_charts_endpoint(
    user_id: UUID,
    session: SessionDep,
    range: Annotated[TimeRange, Query()] = TimeRange.DEFAULT,
) -> DashboardCharts:
    return await get_charts(session, user_id, range)
