from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import anyio
from alembic import command
from alembic.config import Config
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from .config import get_settings
from .models.base import SoftDeleteMixin

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    options: dict = {"echo": False, "future": True}
    if make_url(url).get_backend_name() == "postgresql":
        options["isolation_level"] = settings.database_isolation_level
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@event.listens_for(Session, "do_orm_execute")
def _filter_deleted_rows(execute_state: ORMExecuteState) -> None:
    """Hide soft-deleted rows from every ORM select unless ``include_deleted`` is set."""
    if (
        not execute_state.is_select
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get("include_deleted", False)
    ):
        return
    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            SoftDeleteMixin,
            lambda cls: cls.deleted_at.is_(None),
            include_aliases=True,
        )
    )


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit the block's writes atomically, or roll all of them back.

    Driver errors are translated: integrity violations become
    :class:`ConflictError`, values the column cannot hold become
    :class:`InvalidInputError` and anything else the store raises becomes
    :class:`TransientError`.
    """
    from .services.errors import ConflictError, InvalidInputError, LedgerError, TransientError

    try:
        yield session
        await session.commit()
    except (LedgerError, asyncio.CancelledError):
        await session.rollback()
        raise
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Write rejected by a constraint: %s", exc.orig)
        raise ConflictError("The write conflicts with an existing record.") from exc
    except DataError as exc:
        await session.rollback()
        logger.info("Write rejected by the store: %s", exc.orig)
        raise InvalidInputError("A value is out of range for the ledger.") from exc
    except DBAPIError as exc:
        await session.rollback()
        logger.warning("Store aborted the session: %s", exc.orig)
        raise TransientError("The store could not complete the write; retry the request.") from exc
    except BaseException:
        await session.rollback()
        raise


def _get_alembic_config() -> Config:
    config_path = Path(__file__).resolve().parent.parent / "alembic.ini"
    config = Config(str(config_path))
    migrations_url = settings.direct_database_url or settings.database_url
    config.set_main_option("sqlalchemy.url", migrations_url)
    return config


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency providing an async database session."""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """Apply database migrations on startup."""
    if not settings.auto_run_migrations:
        logger.info("AUTO_RUN_MIGRATIONS disabled; skipping Alembic upgrade on startup.")
        return
    config = _get_alembic_config()
    await anyio.to_thread.run_sync(command.upgrade, config, "head")
