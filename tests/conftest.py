"""
Pytest fixtures for registry tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from achievement_registry.database import build_engine, build_session_maker, init_db
from achievement_registry.kernel.permissions.permission_service import RegistryPolicy
from achievement_registry.kernel.registry.registry_service import AchievementRegistry


# In-memory SQLite; StaticPool keeps one shared connection per engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"

ADMIN = "registry-admin"
NULL_PRINCIPAL = "0x0000000000000000000000000000000000000000"
TEACHER = "teacher-1"
READER = "reader-1"
STRANGER = "stranger-1"


class ManualClock:
    """Host clock driven by the test."""

    def __init__(self, value: int = 100):
        self.value = value

    def now(self) -> int:
        return self.value


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory engine."""
    engine = build_engine(TEST_DATABASE_URL)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session over freshly created tables."""
    await init_db(db_engine)
    session_maker = build_session_maker(db_engine)
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def registry(db_engine: AsyncEngine) -> AsyncGenerator[AchievementRegistry, None]:
    """Initialized registry with the default policy."""
    registry = AchievementRegistry(
        db_engine,
        bootstrap_admin=ADMIN,
        null_principal=NULL_PRINCIPAL,
    )
    await registry.initialize()
    yield registry
    await registry.close()


@pytest_asyncio.fixture
async def restricted_registry(db_engine: AsyncEngine) -> AsyncGenerator[AchievementRegistry, None]:
    """Registry whose reads need level 1."""
    registry = AchievementRegistry(
        db_engine,
        bootstrap_admin=ADMIN,
        null_principal=NULL_PRINCIPAL,
        policy=RegistryPolicy(read_requires_permission=True),
    )
    await registry.initialize()
    yield registry
    await registry.close()


@pytest_asyncio.fixture
async def teacher(registry: AchievementRegistry) -> str:
    """A principal holding read-write access."""
    await registry.set_permission_level(ADMIN, TEACHER, 2)
    return TEACHER


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()
