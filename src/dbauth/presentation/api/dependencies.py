"""FastAPI dependency injection for dbauth.

Provides dependencies for:
- Database sessions
- Handler options (credential store, signup hook)
- The authenticated, CSRF-checked current user
- Webhook signature verification
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dbauth.handler import DbAuthHandler
from dbauth.persistence.sqlalchemy import CredentialStoreSQLAlchemy
from dbauth.presentation.api.config import get_api_settings
from dbauth.schemas import AuthRequest, DbAuthOptions
from dbauth.services import verify_signature
from dbauth.signup import make_signup_handler
from dbauth_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

SettingsDep = Annotated[Settings, Depends(get_api_settings)]


@lru_cache()
def get_engine() -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    url = get_settings().database_url

    # Ensure data directory exists for SQLite
    if url.startswith("sqlite") and ":memory:" not in url:
        db_path = url.split("///")[-1]
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(url, echo=False)


@lru_cache()
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for one request."""
    async with get_session_maker()() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_auth_options(session: DBSession) -> DbAuthOptions:
    """Handler options backed by the request's database session.

    Override this dependency to use another store, field mapping or
    signup hook.
    """
    store = CredentialStoreSQLAlchemy(session)
    return DbAuthOptions(
        db={"user": store},
        signup_handler=make_signup_handler(store),
    )


AuthOptions = Annotated[DbAuthOptions, Depends(get_auth_options)]


async def auth_request_from(request: Request) -> AuthRequest:
    """Convert a Starlette request into the handler's request event."""
    body = await request.body()
    return AuthRequest(
        path=request.url.path,
        http_method=request.method,
        query_string_parameters=dict(request.query_params),
        body=body.decode("utf-8", errors="replace") if body else None,
        headers=dict(request.headers),
    )


async def require_current_user(
    request: Request,
    options: AuthOptions,
    settings: SettingsDep,
) -> dict[str, Any]:
    """The logged-in user, for state-changing routes.

    Requires a valid session cookie and a matching CSRF header. Errors
    are turned into responses by the registered exception handlers.
    """
    handler = DbAuthHandler(await auth_request_from(request), options, settings)
    return await handler.authenticate()


CurrentUser = Annotated[dict[str, Any], Depends(require_current_user)]


async def require_webhook_signature(request: Request, settings: SettingsDep) -> bool:
    """Reject the request unless it carries a valid webhook signature.

    The signature covers the raw body bytes, which need not be UTF-8.
    """
    return verify_signature(
        await request.body(),
        request.headers.get(settings.webhook_signature_header),
        settings.webhook_secret.get_secret_value(),
        tolerance=settings.webhook_tolerance_ms,
    )


VerifiedWebhook = Annotated[bool, Depends(require_webhook_signature)]
