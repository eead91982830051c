from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin
from .types import EnumString, LowercaseEnum


class TransactionType(LowercaseEnum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class TransactionTypeDb(EnumString):
    enum_class = TransactionType
    cache_ok = True


class Transaction(SoftDeleteMixin, Base):
    """Ledger event; never updated once its balance effect is applied."""

    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_user_date", "user_id", "date"),)

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[TransactionType] = mapped_column(TransactionTypeDb(), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="IDR", nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    pocket_from_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("pockets.id"), nullable=True)
    pocket_to_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("pockets.id"), nullable=True)
    user_platform_from_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("user_platforms.id"), nullable=True
    )
    user_platform_to_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("user_platforms.id"), nullable=True
    )
    # weak reference: categories may be deleted without touching history
    category_id: Mapped[Optional[UUID]] = mapped_column(nullable=True)
    note: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    ref: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
