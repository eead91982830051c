from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin


class Allocation(SoftDeleteMixin, Base):
    """Priority-ranked rule taking a percentage of every income, optionally capped."""

    __tablename__ = "allocations"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(Numeric(16, 2), default=Decimal("0.00"), nullable=False)
    target_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(16, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class AllocationLog(Base):
    """Append-only record of one allocation's share of one income transaction."""

    __tablename__ = "allocation_logs"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    allocation_id: Mapped[UUID] = mapped_column(ForeignKey("allocations.id"), nullable=False, index=True)
    transaction_id: Mapped[UUID] = mapped_column(ForeignKey("transactions.id"), nullable=False, index=True)
    income_amount: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    allocated_amount: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
