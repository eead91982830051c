from .allocation import (
    AllocationCreate,
    AllocationLogRead,
    AllocationRead,
    AllocationUpdate,
    DistributionEntry,
    DistributionSummary,
)
from .category import CategoryCreate, CategoryRead, CategoryUpdate
from .daily_summary import CategoryAmount, DailySummaryRead, DailySummaryRunReport
from .dashboard import CashFlowPoint, CategoryChartEntry, DashboardCharts, DashboardSummary, TimeRange
from .platform import PlatformCreate, PlatformRead, UserPlatformCreate, UserPlatformRead, UserPlatformUpdate
from .pocket import PocketCreate, PocketRead, PocketUpdate
from .transaction import TransactionCreate, TransactionRead, TransactionResult, TransactionType
from .user import UserCreate, UserRead

__all__ = [
    "AllocationCreate",
    "AllocationLogRead",
    "AllocationRead",
    "AllocationUpdate",
    "CashFlowPoint",
    "CategoryAmount",
    "CategoryChartEntry",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "DailySummaryRead",
    "DailySummaryRunReport",
    "DashboardCharts",
    "DashboardSummary",
    "DistributionEntry",
    "DistributionSummary",
    "PlatformCreate",
    "PlatformRead",
    "PocketCreate",
    "PocketRead",
    "PocketUpdate",
    "TimeRange",
    "TransactionCreate",
    "TransactionRead",
    "TransactionResult",
    "TransactionType",
    "UserCreate",
    "UserPlatformCreate",
    "UserPlatformRead",
    "UserPlatformUpdate",
    "UserRead",
]
