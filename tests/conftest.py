"""Pytest configuration and fixtures."""

import os
import tempfile

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-jwt-signing-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="evolve-files-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://test")
os.environ.setdefault("APP_ENV", "development")

from collections.abc import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from langchain_core.language_models import BaseChatModel  # noqa: E402
from langchain_core.messages import AIMessage  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from evolve_support.core.database import Base  # noqa: E402
from evolve_support.core.rate_limit import limiter  # noqa: E402
from evolve_support.models.domain_question import DomainQuestion  # noqa: E402, F401
from evolve_support.models.user_query import UserQuery  # noqa: E402, F401
from evolve_support.services.token_service import TokenService  # noqa: E402
from tests.helpers import (  # noqa: E402
    build_app,
    make_auth_headers,
    seed_user,
    test_engine,
    test_session_factory,
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client read by the middleware and get_redis()."""
    monkeypatch.setattr("evolve_support.core.redis.redis_client", fake_redis)


@pytest.fixture(autouse=True)
def disable_rate_limit() -> None:
    """Rate limits are exercised explicitly where needed."""
    limiter.reset()
    limiter.enabled = False


# --- Token helpers ---


@pytest.fixture
def token_service(fake_redis: fakeredis.aioredis.FakeRedis) -> TokenService:
    """Create a TokenService backed by fake Redis."""
    return TokenService(fake_redis)


# --- Mock LLM ---


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(return_value=AIMessage(content="Test response"))
    return mock


# --- App override & client fixtures ---


@pytest.fixture
async def async_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for anonymous requests."""
    application = build_app(mock_llm)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def user_id() -> int:
    """The id of the default seeded user."""
    return await seed_user()


@pytest.fixture
async def authed_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
    user_id: int,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client authenticated as the seeded user."""
    application = build_app(mock_llm)
    headers = make_auth_headers(fake_redis, user_id=user_id)
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    ) as ac:
        yield ac


@pytest.fixture
async def admin_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with admin auth headers."""
    admin_id = await seed_user(phone="5559999999", role="admin")
    application = build_app(mock_llm)
    headers = make_auth_headers(
        fake_redis, user_id=admin_id, phone="5559999999", role="admin"
    )
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    ) as ac:
        yield ac


# --- DB session for tests ---


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session
