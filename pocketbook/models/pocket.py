from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, SoftDeleteMixin
from .types import EnumString, LowercaseEnum

if TYPE_CHECKING:
    from .user import User


class PocketType(LowercaseEnum):
    MAIN = "main"
    ALLOCATION = "allocation"
    SAVING = "saving"
    DEBT = "debt"
    SYSTEM = "system"


class PocketTypeDb(EnumString):
    enum_class = PocketType
    cache_ok = True


_MAIN_ALIVE = "type = 'main' AND deleted_at IS NULL"


class Pocket(SoftDeleteMixin, Base):
    __tablename__ = "pockets"
    __table_args__ = (
        Index(
            "uq_pockets_user_main",
            "user_id",
            unique=True,
            postgresql_where=text(_MAIN_ALIVE),
            sqlite_where=text(_MAIN_ALIVE),
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[PocketType] = mapped_column(PocketTypeDb(), default=PocketType.ALLOCATION, nullable=False)
    category_id: Mapped[Optional[UUID]] = mapped_column(nullable=True)
    balance: Mapped[Decimal] = mapped_column(Numeric(16, 2), default=Decimal("0.00"), nullable=False)
    target_balance: Mapped[Optional[Decimal]] = mapped_column(Numeric(16, 2), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_use_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship(back_populates="pockets")
