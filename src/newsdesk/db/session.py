# ABOUTME: Async engine, session lifecycle and per-request transaction rules.
# ABOUTME: Best-effort steps run in SAVEPOINTs; writes are committed before the response.

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager, nullcontext
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from newsdesk.config import get_settings
from newsdesk.db.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

log = structlog.get_logger()

_engine: "AsyncEngine | None" = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

# Opens a SAVEPOINT around a best-effort step
SavepointFactory = Callable[[], AbstractAsyncContextManager[Any]]


def no_savepoint() -> AbstractAsyncContextManager[Any]:
    """Stand-in for callers that run without a database transaction."""
    return nullcontext()


class RequestTransaction:
    """The one transaction a request's writes share.

    A submission's base, web and print articles must land together, but a
    few steps are allowed to fail without sinking the rest: category
    auto-creation, reference lookups and the web article. Those run inside
    :meth:`savepoint`, so a database error rolls back to the SAVEPOINT and
    the outer transaction stays usable.

    Handlers call :meth:`commit` before building their response. Waiting for
    the session dependency to close is too late, since its teardown runs
    after the response has been sent.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncGenerator[AsyncSession]:
        """Run a best-effort step in a nested transaction.

        The step's exception is re-raised after the rollback to the
        SAVEPOINT; callers decide whether to swallow it.
        """
        async with self.session.begin_nested():
            yield self.session

    async def commit(self) -> None:
        """Commit the request's writes."""
        await self.session.commit()
        log.debug("request_transaction_committed")


def get_engine() -> "AsyncEngine":
    """Get or create the async database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            echo=settings.log_level == "DEBUG",
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory.

    Objects stay loaded after commit so a handler can build its response
    from rows it has just committed.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession]:
    """Session scope for the CLI and the request dependency.

    Anything left uncommitted when the block exits normally is committed;
    an exception rolls the whole transaction back, SAVEPOINTs included.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    session = get_session_factory()()
    try:
        yield session
        if session.in_transaction():
            await session.commit()
    except Exception:
        await session.rollback()
        log.debug("session_rolled_back")
        raise
    finally:
        await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database sessions."""
    async with get_session() as session:
        yield session


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("database_initialized")


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
