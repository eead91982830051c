from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class User(Base):
    """Account owner; optionally linked to a Telegram account."""

    __tablename__ = "users"

    telegram_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, unique=True, nullable=True, index=True
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    pockets: Mapped[list["Pocket"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    user_platforms: Mapped[list["UserPlatform"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )


from .pocket import Pocket  # noqa: E402
from .platform import UserPlatform  # noqa: E402
