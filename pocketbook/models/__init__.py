from .allocation import Allocation, AllocationLog
from .base import Base, SoftDeleteMixin
from .category import Category
from .daily_summary import DailySummary
from .platform import Platform, PlatformType, UserPlatform
from .pocket import Pocket, PocketType
from .transaction import Transaction, TransactionType
from .user import User

__all__ = [
    "Allocation",
    "AllocationLog",
    "Base",
    "Category",
    "DailySummary",
    "Platform",
    "PlatformType",
    "Pocket",
    "PocketType",
    "SoftDeleteMixin",
    "Transaction",
    "TransactionType",
    "User",
    "UserPlatform",
]
