"""Database Session Manager — async connection pool with tagged, scoped transactions.

Invariants:
    - Every transaction is released on every exit path (commit, rollback, or error)
    - Read-write transactions commit only if the body completes; otherwise nothing persists
    - Read-only transactions get a consistent snapshot (REPEATABLE READ, read only on PostgreSQL)
    - All SQLAlchemy exceptions mapped to StoreError (core/errors.py)
    - SQLite connections enforce foreign keys, like PostgreSQL does

Design Decisions:
    - Manager owned by the FastAPI lifespan and injected into the store (no module global)
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Transaction tag kept in session.info so every log line of the transaction can carry it
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from app.core.errors import StoreError, StoreFailure, ErrorContext

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseSessionManager:
    """Manages async database sessions with pooling, tagging, and error mapping."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        if database_url.startswith("sqlite"):
            engine = create_async_engine(database_url)
        else:
            engine = create_async_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self._bind(engine)

    @classmethod
    def for_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        """Wrap an existing engine (test fixtures, scripts)."""
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _snapshot_options(self) -> dict:
        if self.engine.dialect.name == "postgresql":
            return {
                "isolation_level": "REPEATABLE READ",
                "postgresql_readonly": True,
            }
        return {}

    @asynccontextmanager
    async def transaction(
        self, operation: str, tag: str, read_only: bool = False,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide a tagged transaction; commit on success, roll back on exception."""
        session = self._session_factory()
        session.info["transaction_tag"] = tag
        ctx = ErrorContext(transaction_tag=tag)
        try:
            if read_only:
                await session.connection(
                    execution_options=self._snapshot_options(),
                )
                yield session
            else:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(
                f"DB integrity error: {e.orig}",
                extra={"transaction_tag": tag},
            )
            raise StoreError(
                "Integrity constraint violated", operation,
                StoreFailure.CONSTRAINT, ctx,
            ) from e
        except OperationalError as e:
            await session.rollback()
            logger.error(
                f"DB operational error: {e.orig}",
                extra={"transaction_tag": tag},
            )
            raise StoreError(
                "Connection or operational error", operation,
                StoreFailure.UNAVAILABLE, ctx,
            ) from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(
                f"DB driver error: {e.orig}",
                extra={"transaction_tag": tag},
            )
            raise StoreError(
                "Database driver error", operation,
                StoreFailure.UNKNOWN, ctx,
            ) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(
                f"SQLAlchemy error: {e}", extra={"transaction_tag": tag},
            )
            raise StoreError(
                "Database operation failed", operation,
                StoreFailure.UNKNOWN, ctx,
            ) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.transaction(
                "health_check", "func=HealthCheck", read_only=True,
            ) as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
