"""Shared test fixtures."""

from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
from litestar.testing import AsyncTestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from moodmeter_server.app import create_app
from moodmeter_server.core.config import Settings
from moodmeter_server.core.password import hash_password
from moodmeter_server.core.security import generate_token
from moodmeter_server.models.base import Base
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User

TEST_PASSWORD = "correct horse battery staple"

UserFactory = Callable[..., Awaitable[User]]


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = 1_767_225_600_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    """Fixed clock starting at 2026-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def make_user(async_session: AsyncSession) -> UserFactory:
    """Factory creating users with the shared test password."""

    async def factory(
        username: str,
        is_profile_private: bool = False,
        is_history_private: bool = False,
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(
            username=username,
            password_hash=hash_password(password),
            token=generate_token(),
            is_profile_private=is_profile_private,
            is_history_private=is_history_private,
        )
        async_session.add(user)
        await async_session.commit()
        await async_session.refresh(user)
        return user

    return factory


@pytest.fixture
async def test_user(make_user: UserFactory) -> User:
    """Create a public test user."""
    return await make_user("alice")


@pytest.fixture
async def private_user(make_user: UserFactory) -> User:
    """Create a user with a private profile."""
    return await make_user("carol", is_profile_private=True)


@pytest.fixture
def add_samples(async_session: AsyncSession):
    """Insert samples directly, counting each towards ``stats_mood_sets``."""

    async def factory(user: User, *samples: tuple[int, float, float]) -> list[MoodSample]:
        rows = [
            MoodSample(user_id=user.id, timestamp=ts, pleasantness=p, energy=e)
            for ts, p, e in samples
        ]
        async_session.add_all(rows)
        user.stats_mood_sets += len(rows)
        await async_session.commit()
        return rows

    return factory


@pytest.fixture
async def client(async_engine) -> AsyncIterator[AsyncTestClient]:
    """Test client for an app bound to the test database."""
    app = create_app(
        Settings(database_url="sqlite+aiosqlite://", log_level="WARNING"),
        engine=async_engine,
    )
    async with AsyncTestClient(app=app) as test_client:
        yield test_client


def auth(user: User) -> dict[str, str]:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {user.token}"}
