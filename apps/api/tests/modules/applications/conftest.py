"""
Fixtures for membership applications tests.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from astro_api.core.config import Settings
from astro_api.core.database import Base, get_db
from astro_api.core.rate_limit import SlidingWindowRateLimiter
from astro_api.core.storage import ObjectStoreError
from astro_api.main import create_app
from astro_api.modules.applications.models import MemberApplication
from astro_api.modules.applications.schemas import ApplicationForm

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIB = 1024 * 1024


class FakeClock:
    """Manually advanced time source for the rate limiter."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeObjectStore:
    """In-memory object store recording every save."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.save_calls = 0

    async def save(self, path: str, data: bytes, content_type: str) -> None:
        self.save_calls += 1
        if self.fail:
            raise ObjectStoreError("bucket unavailable")
        self.objects[path] = (data, content_type)


@pytest.fixture
def valid_payload() -> dict:
    return {
        "fullName": "Ada Lovelace",
        "email": "ada@alu.edu",
        "reason": "I love the stars and want to learn more.",
        "consent": True,
    }


@pytest.fixture
def valid_form(valid_payload) -> ApplicationForm:
    return ApplicationForm.from_mapping(valid_payload)


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def sample_application_model():
    """Create a sample persisted application."""
    app = MagicMock(spec=MemberApplication)
    app.id = uuid4()
    app.full_name = "Ada Lovelace"
    app.email = "ada@alu.edu"
    app.phone = None
    app.department = None
    app.reason = "I love the stars and want to learn more."
    app.skills = None
    app.consent = True
    app.cv_path = None
    app.created_at = datetime.now(UTC)
    return app


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory SQLite Document Store per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def app(session_maker, object_store, rate_limiter) -> FastAPI:
    """App wired to in-memory stores."""
    app = create_app(Settings(python_env="test", max_body_bytes=10 * MIB))
    app.state.rate_limiter = rate_limiter
    app.state.object_store = object_store

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the in-memory app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
