from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, SoftDeleteMixin
from .types import EnumString, LowercaseEnum

if TYPE_CHECKING:
    from .user import User


class PlatformType(LowercaseEnum):
    BANK = "bank"
    E_WALLET = "e_wallet"
    CASH = "cash"
    ATM = "atm"


class PlatformTypeDb(EnumString):
    enum_class = PlatformType
    cache_ok = True


class Platform(SoftDeleteMixin, Base):
    """External value endpoint (a bank, an e-wallet provider...). Holds no balance."""

    __tablename__ = "platforms"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    type: Mapped[PlatformType] = mapped_column(PlatformTypeDb(), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class UserPlatform(SoftDeleteMixin, Base):
    """A user's handle on a platform, carrying its own balance."""

    __tablename__ = "user_platforms"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform_id: Mapped[UUID] = mapped_column(ForeignKey("platforms.id"), nullable=False)
    alias_name: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    balance: Mapped[Decimal] = mapped_column(Numeric(16, 2), default=Decimal("0.00"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_use_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship(back_populates="user_platforms")
    platform: Mapped[Platform] = relationship(lazy="joined")
