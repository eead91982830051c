from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin
from .transaction import TransactionType, TransactionTypeDb


class Category(SoftDeleteMixin, Base):
    """User-defined label for transactions; referenced weakly by id."""

    __tablename__ = "categories"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    transaction_type: Mapped[Optional[TransactionType]] = mapped_column(
        TransactionTypeDb(), nullable=True
    )
