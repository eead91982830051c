"""Ledger schema.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:01.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "20261019_000001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
    ]


def _deleted_at() -> sa.Column:
    return sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True)


def _user_fk() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("telegram_id", sa.BigInteger(), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_users_telegram_id", "users", ["telegram_id"], unique=True)

    op.create_table(
        "categories",
        *_timestamps(),
        _deleted_at(),
        _user_fk(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("transaction_type", sa.String(length=16), nullable=True),
    )
    op.create_index("ix_categories_user_id", "categories", ["user_id"])

    op.create_table(
        "platforms",
        *_timestamps(),
        _deleted_at(),
        sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "pockets",
        *_timestamps(),
        _deleted_at(),
        _user_fk(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("balance", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("target_balance", sa.Numeric(16, 2), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_use_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_pockets_user_id", "pockets", ["user_id"])
    op.create_index(
        "uq_pockets_user_main",
        "pockets",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("type = 'main' AND deleted_at IS NULL"),
    )

    op.create_table(
        "user_platforms",
        *_timestamps(),
        _deleted_at(),
        _user_fk(),
        sa.Column(
            "platform_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("platforms.id"),
            nullable=False,
        ),
        sa.Column("alias_name", sa.String(length=64), nullable=True),
        sa.Column("balance", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_use_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_platforms_user_id", "user_platforms", ["user_id"])

    op.create_table(
        "allocations",
        *_timestamps(),
        _deleted_at(),
        _user_fk(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("current_amount", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("target_amount", sa.Numeric(16, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_allocations_user_id", "allocations", ["user_id"])

    op.create_table(
        "transactions",
        *_timestamps(),
        _deleted_at(),
        _user_fk(),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Numeric(16, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default=sa.text("'IDR'")),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pocket_from_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("pockets.id"), nullable=True),
        sa.Column("pocket_to_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("pockets.id"), nullable=True),
        sa.Column(
            "user_platform_from_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("user_platforms.id"),
            nullable=True,
        ),
        sa.Column(
            "user_platform_to_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("user_platforms.id"),
            nullable=True,
        ),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("note", sa.String(length=512), nullable=True),
        sa.Column("ref", sa.String(length=128), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_user_date", "transactions", ["user_id", sa.text("date DESC")])

    op.create_table(
        "allocation_logs",
        *_timestamps(),
        _user_fk(),
        sa.Column(
            "allocation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("allocations.id"),
            nullable=False,
        ),
        sa.Column(
            "transaction_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("transactions.id"),
            nullable=False,
        ),
        sa.Column("income_amount", sa.Numeric(16, 2), nullable=False),
        sa.Column("allocated_amount", sa.Numeric(16, 2), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
    )
    op.create_index("ix_allocation_logs_allocation_id", "allocation_logs", ["allocation_id"])
    op.create_index("ix_allocation_logs_transaction_id", "allocation_logs", ["transaction_id"])

    op.create_table(
        "daily_summaries",
        *_timestamps(),
        _user_fk(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_income", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_expense", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "category_breakdown",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_summaries_user_date"),
    )


def downgrade() -> None:
    op.drop_table("daily_summaries")
    op.drop_index("ix_allocation_logs_transaction_id", table_name="allocation_logs")
    op.drop_index("ix_allocation_logs_allocation_id", table_name="allocation_logs")
    op.drop_table("allocation_logs")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_allocations_user_id", table_name="allocations")
    op.drop_table("allocations")
    op.drop_index("ix_user_platforms_user_id", table_name="user_platforms")
    op.drop_table("user_platforms")
    op.drop_index("uq_pockets_user_main", table_name="pockets")
    op.drop_index("ix_pockets_user_id", table_name="pockets")
    op.drop_table("pockets")
    op.drop_table("platforms")
    op.drop_index("ix_categories_user_id", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_users_telegram_id", table_name="users")
    op.drop_table("users")
