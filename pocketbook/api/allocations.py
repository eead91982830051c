from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas.allocation import AllocationCreate, AllocationLogRead, AllocationRead, AllocationUpdate
from ..services import (
    create_allocation,
    delete_allocation,
    list_allocation_logs,
    list_allocations,
    update_allocation,
)

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=AllocationRead, status_code=status.HTTP_201_CREATED)
async def create_allocation_endpoint(payload: AllocationCreate, session: SessionDep) -> AllocationRead:
    allocation = await create_allocation(session, payload)
    return AllocationRead.model_validate(allocation)


@router.get("", response_model=list[AllocationRead])
async def list_allocations_endpoint(
    user_id: UUID, session: SessionDep, active_only: bool = False
) -> list[AllocationRead]:
    allocations = await list_allocations(session, user_id, active_only=active_only)
    return [AllocationRead.model_validate(allocation) for allocation in allocations]


# declared before the /{allocation_id} routes so "logs" is not parsed as an id
@router.get("/logs", response_model=list[AllocationLogRead])
async def list_allocation_logs_endpoint(
    user_id: UUID,
    session: SessionDep,
    allocation_id: Optional[UUID] = Query(default=None),
    transaction_id: Optional[UUID] = Query(default=None),
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[AllocationLogRead]:
    logs = await list_allocation_logs(
        session,
        user_id,
        allocation_id=allocation_id,
        transaction_id=transaction_id,
        limit=limit,
        offset=offset,
    )
    return [AllocationLogRead.model_validate(log) for log in logs]


@router.patch("/{allocation_id}", response_model=AllocationRead)
async def update_allocation_endpoint(
    allocation_id: UUID, user_id: UUID, payload: AllocationUpdate, session: SessionDep
) -> AllocationRead:
    allocation = await update_allocation(session, user_id, allocation_id, payload)
    return AllocationRead.model_validate(allocation)


@router.delete("/{allocation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_allocation_endpoint(allocation_id: UUID, user_id: UUID, session: SessionDep) -> Response:
    await delete_allocation(session, user_id, allocation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
