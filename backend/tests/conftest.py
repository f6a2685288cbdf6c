"""Shared test fixtures for the LMS API tests."""

import fnmatch
import os

# Must be set before lms.config is imported.
os.environ.setdefault("DEV_MODE", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lms.api.dependencies import get_cache, get_db, password_hasher, token_service
from lms.core.cache import CacheService
from lms.db.models import Base, Course, User
from lms.main import app
from lms.middleware.rate_limiter import limiter

# Use an in-memory SQLite database for tests.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

ADMIN_PASSWORD = "Admin123!"
STUDENT_PASSWORD = "Student123!"


@event.listens_for(engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeRedis:
    """Dict-backed stand-in for the handful of redis commands the cache uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise OSError("redis unavailable")

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        self._check()
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def scan_iter(self, match=None):
        self._check()
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self):
        self._check()
        return True


@pytest_asyncio.fixture
async def db() -> AsyncSession:
    """Create tables and yield a fresh async session for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> CacheService:
    async def _client():
        return fake_redis

    return CacheService(_client, default_ttl=300, max_tracked_keys=100)


@pytest_asyncio.fixture
async def client(db: AsyncSession, cache: CacheService):
    """HTTP client against the app with the test session and cache injected."""

    async def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_cache] = lambda: cache
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, name: str, email: str, password: str, role: str) -> User:
    user = User(name=name, email=email, password_hash=password_hasher.hash(password), role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await _create_user(db, "Ada Admin", "admin@example.com", ADMIN_PASSWORD, "Admin")


@pytest_asyncio.fixture
async def student_user(db: AsyncSession) -> User:
    return await _create_user(db, "Sam Student", "student@example.com", STUDENT_PASSWORD, "Student")


@pytest_asyncio.fixture
async def course(db: AsyncSession, admin_user: User) -> Course:
    course = Course(
        title="Intro to Databases",
        description="Relational modelling and SQL",
        instructor_id=admin_user.id,
        duration_in_hours=12,
    )
    db.add(course)
    await db.commit()
    await db.refresh(course)
    return course


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    token, _ = token_service.create_access_token(admin_user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(student_user: User) -> dict[str, str]:
    token, _ = token_service.create_access_token(student_user)
    return {"Authorization": f"Bearer {token}"}
