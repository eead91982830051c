from fastapi import APIRouter

from . import (
    allocations,
    categories,
    daily_summaries,
    dashboard,
    platforms,
    pockets,
    telegram,
    transactions,
    user_platforms,
    users,
)

api_router = APIRouter()
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(daily_summaries.router, prefix="/daily-summaries", tags=["daily-summaries"])
api_router.include_router(pockets.router, prefix="/pockets", tags=["pockets"])
api_router.include_router(user_platforms.router, prefix="/user-platforms", tags=["user-platforms"])
api_router.include_router(platforms.router, prefix="/platforms", tags=["platforms"])
api_router.include_router(allocations.router, prefix="/allocations", tags=["allocations"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])
