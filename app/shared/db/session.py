"""
Database lifecycle and resilient execution.

One `Database` is built per process (in the FastAPI lifespan or a script),
passed to whoever needs it and disposed on shutdown. Every unit of work goes
through `Database.run`, which owns the session, translates driver errors into
the typed persistence hierarchy and reconnects-and-retries on connection loss.
"""

from typing import Any, Awaitable, Callable, TypeVar
from fastapi import Request
from sqlalchemy import text
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
import structlog

from app.shared.core.config import Settings
from app.shared.core.exceptions import (
    PersistenceError,
    ConnectionLostError,
    ConstraintViolationError,
    QueryError,
)
from app.shared.db.base import Base

logger = structlog.get_logger()

T = TypeVar("T")

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def classify_db_error(error: BaseException) -> PersistenceError:
    """
    Map a driver / SQLAlchemy error onto the persistence hierarchy by type.

    Connection class: pool timeouts, explicit disconnections, DBAPI errors the
    dialect flagged as invalidating the connection, interface errors and raw
    socket errors. Integrity errors are constraint violations. The rest are
    query errors.
    """
    if isinstance(error, PersistenceError):
        return error
    if isinstance(error, (sa_exc.DisconnectionError, sa_exc.TimeoutError, OSError)):
        return ConnectionLostError()
    if isinstance(error, sa_exc.DBAPIError):
        if error.connection_invalidated or isinstance(error, sa_exc.InterfaceError):
            return ConnectionLostError()
        if isinstance(error.orig, OSError):
            return ConnectionLostError()
        if isinstance(error, sa_exc.IntegrityError):
            return ConstraintViolationError()
    return QueryError()


class Database:
    """Owns the pooled async engine and the retry policy."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        retry_attempts: int = 3,
        retry_base_delay: float = 0.5,
        echo: bool = False,
    ):
        pool_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            # SQLite files: one connection per session keeps concurrent readers isolated
            pool_args["poolclass"] = NullPool
            # Concurrent writers wait on the file lock instead of failing fast
            pool_args["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
        else:
            pool_args["pool_size"] = pool_size
            pool_args["max_overflow"] = max_overflow
            pool_args["pool_pre_ping"] = True
            pool_args["pool_recycle"] = 300

        self.url = url
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, **pool_args
        )
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            retry_attempts=settings.DB_RETRY_ATTEMPTS,
            retry_base_delay=settings.DB_RETRY_BASE_DELAY_SECONDS,
            echo=settings.DEBUG,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def create_all(self) -> None:
        """Creates every table registered on Base.metadata (no migrations)."""
        import app.models  # noqa: F401  (registers mappers)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ready", dialect=self.dialect_name)

    async def ping(self) -> bool:
        async def _select_one(session: AsyncSession) -> bool:
            await session.execute(text("SELECT 1"))
            return True

        return await self.run(_select_one)

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            "database_connection_retry",
            attempt=retry_state.attempt_number,
            max_attempts=self.retry_attempts,
            sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        )

    async def run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Executes `operation` in a fresh session.

        Only ConnectionLostError is retried; the pool is disposed first so the
        next attempt reconnects. Every other failure propagates on the first
        attempt as a typed PersistenceError chained to the driver error.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(ConnectionLostError),
            wait=wait_exponential(multiplier=self.retry_base_delay),
            stop=stop_after_attempt(self.retry_attempts),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                try:
                    async with self.session_maker() as session:
                        return await operation(session)
                except (sa_exc.SQLAlchemyError, OSError) as e:
                    error = classify_db_error(e)
                    if isinstance(error, ConnectionLostError):
                        logger.warning("database_connection_lost", error=str(e))
                        await self.engine.dispose()
                    raise error from e

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_pool_closed")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the process-wide Database from app state."""
    return request.app.state.db
