from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import SessionLocal, get_db
from ..schemas.daily_summary import DailySummaryRead, DailySummaryRebuildRequest, DailySummaryRunReport
from ..services import backfill_daily_summaries, list_daily_summaries

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=list[DailySummaryRead])
async def list_daily_summaries_endpoint(
    user_id: UUID,
    session: SessionDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
) -> list[DailySummaryRead]:
    summaries = await list_daily_summaries(session, user_id, start, end)
    return [DailySummaryRead.model_validate(summary) for summary in summaries]


@router.post("/rebuild", response_model=list[DailySummaryRunReport])
async def rebuild_daily_summaries_endpoint(payload: DailySummaryRebuildRequest) -> list[DailySummaryRunReport]:
    return await backfill_daily_summaries(SessionLocal, payload.start, payload.end)
