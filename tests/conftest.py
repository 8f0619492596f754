# tests/conftest.py
import os
import time
from datetime import timedelta

# Настройки должны быть в окружении до первого импорта app.*
os.environ.setdefault("DATABASE_USER", "test")
os.environ.setdefault("DATABASE_PASSWORD", "test")
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-signing-tokens")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from unittest.mock import AsyncMock

from app.clients.mail import MailClient
from app.core.redis import get_redis_client
from app.db.session import Base
from app.dependencies import get_db, get_mail_client
from app.main import app
from app.models import user, referral, refresh_token  # noqa: F401  Импортируем все модели для создания таблиц
from app.crud import user as crud_user
from app.services import auth as auth_service

# In-memory SQLite с одним соединением на все сессии
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeRedis:
    """Минимальная замена redis.asyncio.Redis для тестов: строки, TTL, NX."""

    def __init__(self):
        self.store: dict[str, tuple[str, float | None]] = {}

    def _alive(self, key: str) -> bool:
        item = self.store.get(key)
        if item is None:
            return False
        _, expires_at = item
        if expires_at is not None and expires_at <= time.monotonic():
            del self.store[key]
            return False
        return True

    async def set(self, key, value, ex=None, px=None, nx=False):
        if nx and self._alive(key):
            return None
        if isinstance(ex, timedelta):
            ex = ex.total_seconds()
        if px is not None:
            ex = px / 1000
        expires_at = time.monotonic() + ex if ex is not None else None
        self.store[key] = (str(value), expires_at)
        return True

    async def get(self, key):
        if not self._alive(key):
            return None
        return self.store[key][0]

    async def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                deleted += 1
        return deleted

    def expire_now(self, key: str) -> None:
        value, _ = self.store[key]
        self.store[key] = (value, time.monotonic() - 1)


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Фикстура для создания чистой базы данных для каждого теста.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def mock_mail_client() -> AsyncMock:
    return AsyncMock(spec=MailClient)


@pytest.fixture
async def client(db_session, fake_redis, mock_mail_client):
    """HTTP-клиент к приложению с подмененными БД, Redis и почтой."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    app.dependency_overrides[get_mail_client] = lambda: mock_mail_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


TEST_EMAIL = "alice@example.com"
TEST_PASSWORD = "s3cret-Password"


@pytest.fixture
async def registered_user(db_session, fake_redis):
    """Регистрирует пользователя и возвращает (User, Token)."""
    tokens = await auth_service.sign_up(db_session, fake_redis, email=TEST_EMAIL, password=TEST_PASSWORD)
    db_user = crud_user.get_user_by_email(db_session, TEST_EMAIL)
    return db_user, tokens


@pytest.fixture
def auth_headers(registered_user) -> dict:
    _, tokens = registered_user
    return {"Authorization": f"Bearer {tokens.access_token}"}


@pytest.fixture
def session_factory(db_session):
    """Фабрика сессий на той же тестовой БД (для фоновых задач, открывающих свою сессию)."""
    return TestingSessionLocal
