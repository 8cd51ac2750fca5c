"""Pytest configuration and fixtures for the CMS tests."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENABLE_PROMETHEUS_METRICS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rinart_cms.core import security
from rinart_cms.core.config import get_settings
from rinart_cms.db import get_session, init_db
from rinart_cms.main import create_app
from rinart_cms.repositories.admin import SqlAlchemyAdminRepository
from rinart_cms.services.revalidation import RevalidationService

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "correct-horse"


class RecordingRevalidation(RevalidationService):
    """Revalidation service that remembers the paths instead of calling a webhook."""

    def __init__(self) -> None:
        super().__init__(webhook_url=None)
        self.calls: list[list[str]] = []

    async def revalidate(self, paths) -> None:
        self.calls.append(list(paths))

    @property
    def paths(self) -> set[str]:
        return {path for call in self.calls for path in call}


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Point uploads at a temporary directory and drop the login delay."""

    uploads = tmp_path / "uploads"
    uploads.mkdir()
    monkeypatch.setenv("UPLOADS_DIR", str(uploads))
    monkeypatch.setenv("SITE_URL", "https://rinart.test")
    monkeypatch.delenv("RECAPTCHA_SECRET_KEY", raising=False)
    get_settings.cache_clear()

    async def _no_delay() -> None:
        return None

    monkeypatch.setattr(security, "failed_login_delay", _no_delay)
    monkeypatch.setattr("rinart_cms.api.routes.auth.failed_login_delay", _no_delay)
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def uploads_dir(settings_env):
    return settings_env.uploads_path


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite database engine for testing."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def revalidation() -> RecordingRevalidation:
    return RecordingRevalidation()


@pytest.fixture
def app(settings_env, session_factory, revalidation):
    application = create_app()

    async def _session_override():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_session] = _session_override
    application.state.revalidation = revalidation
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture
async def admin_user(session_factory):
    async with session_factory() as session:
        return await SqlAlchemyAdminRepository(session).create_user(
            ADMIN_LOGIN, security.hash_password(ADMIN_PASSWORD)
        )


@pytest.fixture
async def admin_client(client, admin_user):
    """HTTP client carrying a valid admin session cookie."""

    response = await client.post("/api/admin/login", json={"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return client
