"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from liveroom.api.auth import get_current_user
from liveroom.core.db import Base, get_db
from liveroom.main import create_app

# Import all models so their tables are registered
from liveroom.models import LiveSession, LiveSessionAuditLog, User  # noqa: F401
from tests.factories import LiveSessionFactory, UserFactory

TEST_LIVEKIT_API_KEY = "APItestkey"
TEST_LIVEKIT_API_SECRET = "test-secret-with-at-least-thirty-two-bytes"
TEST_LIVEKIT_URL = "wss://livekit.test"


@pytest.fixture(autouse=True)
def video_env(monkeypatch):
    """Signing material for the credential issuer."""
    monkeypatch.setenv("LIVEKIT_API_KEY", TEST_LIVEKIT_API_KEY)
    monkeypatch.setenv("LIVEKIT_API_SECRET", TEST_LIVEKIT_API_SECRET)
    monkeypatch.setenv("LIVEKIT_URL", TEST_LIVEKIT_URL)
    monkeypatch.delenv("ROOM_TOKEN_TTL_SECONDS", raising=False)
    monkeypatch.delenv("SESSION_INACTIVITY_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("SENTRY_DSN", raising=False)


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite so concurrent sessions get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'liveroom_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create fresh DB session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def tutor(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="tutor@example.com", name="Tara Tutor")


@pytest_asyncio.fixture
async def learner(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="learner@example.com", name="Leo Learner")


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="outsider@example.com", name="Olga Other")


@pytest_asyncio.fixture
async def live_session(db_session: AsyncSession, tutor: User, learner: User) -> LiveSession:
    """Scheduled session S1 between tutor T and learner L."""
    return await LiveSessionFactory.create(
        db_session,
        id="S1",
        tutor_id=tutor.id,
        learner_id=learner.id,
    )


@pytest_asyncio.fixture
async def client(session_factory):
    """Async test client; each request gets its own DB session."""
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        ac.test_app = app
        yield ac


def act_as(client: AsyncClient, user: User) -> None:
    """Make ``user`` the authenticated caller for subsequent requests."""

    async def override_get_current_user():
        return user

    client.test_app.dependency_overrides[get_current_user] = override_get_current_user


async def load_live_session(session_factory, session_id: str) -> LiveSession:
    """Read a session's committed state through a fresh DB session."""
    async with session_factory() as session:
        result = await session.execute(select(LiveSession).where(LiveSession.id == session_id))
        return result.scalar_one()


async def load_audit_rows(session_factory, session_id: str) -> list[LiveSessionAuditLog]:
    async with session_factory() as session:
        result = await session.execute(
            select(LiveSessionAuditLog)
            .where(LiveSessionAuditLog.session_id == session_id)
            .order_by(LiveSessionAuditLog.changed_at)
        )
        return list(result.scalars().all())
