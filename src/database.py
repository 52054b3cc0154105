from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
import os
import sys

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import NullPool

from src.config import settings
from src.errors import ConflictError, DatabaseUnavailableError, TransactionConflictError


_engine_kwargs: dict = {"pool_pre_ping": True}

# NOTE: asyncpg connections in a pooled engine must not be shared across event
# loops, and pytest may run several loops in one process. Disable pooling there.
if os.getenv("PYTEST_CURRENT_TEST") or ("pytest" in sys.modules):
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.database_url, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION or getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # SQLite reports constraint failures by message only.
    return "UNIQUE constraint failed" in str(orig)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything done inside the block as one unit, or nothing.

    Concurrency failures surface as retryable typed errors; domain errors raised
    inside the block roll back and propagate unchanged.
    """

    try:
        yield session
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        raise TransactionConflictError(
            "The record was modified by a concurrent request; retry the operation"
        ) from exc
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise TransactionConflictError(
                "A concurrent request wrote the same record; retry the operation"
            ) from exc
        raise ConflictError("The change violates a data integrity constraint") from exc
    except OperationalError as exc:
        await session.rollback()
        if exc.connection_invalidated:
            raise DatabaseUnavailableError("Database connection lost") from exc
        raise TransactionConflictError("Transaction aborted by the database; retry the operation") from exc
    except DBAPIError as exc:
        await session.rollback()
        if exc.connection_invalidated:
            raise DatabaseUnavailableError("Database connection lost") from exc
        raise
    except BaseException:
        await session.rollback()
        raise
