"""Pytest fixtures for store and API integration tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dbauth.persistence.sqlalchemy import AuthBase
from dbauth.presentation.api import (
    CurrentUser,
    VerifiedWebhook,
    create_app,
    get_auth_options,
    get_db_session,
    setup_exception_handlers,
)
from dbauth.presentation.api.config import get_api_settings
from dbauth.presentation.api.dependencies import get_engine, get_session_maker
from dbauth_config import clear_settings_cache


class RecordingSession:
    """Stands in for the request's database session.

    The in-memory store does not need a database, but the router still
    commits or rolls back depending on the outcome.
    """

    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


@pytest.fixture
async def sqlite_engine():
    """Create an in-memory SQLite database with the auth tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(AuthBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def sqlite_session(sqlite_engine):
    """Create a database session on the in-memory database."""
    session_maker = async_sessionmaker(
        sqlite_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session


@pytest.fixture
def db_session() -> RecordingSession:
    """Session double shared by every request of one test."""
    return RecordingSession()


@pytest.fixture
def test_client(settings, options, db_session) -> TestClient:
    """Auth app backed by the in-memory store."""
    app = create_app(settings=settings, create_tables=False)

    async def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_auth_options] = lambda: options

    return TestClient(app)


@pytest.fixture
def protected_client(settings, options) -> TestClient:
    """App with routes guarded by the current-user and webhook dependencies."""
    app = FastAPI()
    setup_exception_handlers(app)

    @app.post("/profile")
    async def profile(user: CurrentUser) -> dict:
        return user

    @app.post("/webhook")
    async def webhook(verified: VerifiedWebhook) -> dict:
        return {"verified": verified}

    app.dependency_overrides[get_api_settings] = lambda: settings
    app.dependency_overrides[get_auth_options] = lambda: options

    return TestClient(app)


@pytest.fixture
def sqlite_app_env(tmp_path, monkeypatch):
    """Point the cached engine at a throwaway SQLite file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/dbauth.db")
    clear_settings_cache()
    get_engine.cache_clear()
    get_session_maker.cache_clear()

    yield

    get_engine.cache_clear()
    get_session_maker.cache_clear()
    clear_settings_cache()
