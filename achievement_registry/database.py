"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.

SQLite connections emit their own BEGIN: write sessions open with
BEGIN IMMEDIATE so concurrent writers, including other processes on the
same file, queue on the database lock instead of interleaving.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

# Execution option read by the SQLite "begin" hook
SQLITE_BEGIN_OPTION = "sqlite_begin"


def is_memory_url(database_url: str) -> bool:
    """True for SQLite URLs that keep the whole database in memory."""
    return database_url.startswith("sqlite") and (
        database_url.endswith("://") or ":memory:" in database_url
    )


def _take_over_sqlite_begin(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_conn, connection_record):
        # The driver would otherwise defer BEGIN until the first write
        dbapi_conn.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine suited to the configured backend."""
    if is_memory_url(database_url):
        # One shared connection, otherwise every session sees an empty database
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _take_over_sqlite_begin(engine)
        return engine

    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable WAL mode on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        _take_over_sqlite_begin(engine)
        return engine

    # PostgreSQL settings with connection pooling
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def build_write_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose transactions take the SQLite write lock up front."""
    return build_session_maker(engine.execution_options(**{SQLITE_BEGIN_OPTION: "IMMEDIATE"}))


async def init_db(engine: AsyncEngine) -> None:
    """Create registry tables."""
    # Import Base from kernel models to ensure all models are registered
    from achievement_registry.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections."""
    await engine.dispose()
