"""FastAPI application factory.

Creates an application serving the auth router under the configured
prefix, with logging and exception handlers set up.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import FastAPI

from dbauth.persistence.sqlalchemy import AuthBase
from dbauth.presentation.api.config import get_api_settings
from dbauth.presentation.api.dependencies import get_engine
from dbauth.presentation.api.exception_handlers import setup_exception_handlers
from dbauth.presentation.api.router import router as auth_router
from dbauth_config.settings import Settings, get_settings


@lru_cache(maxsize=1)
def configure_logging() -> None:
    """Configure application logging.

    Sets up logging with:
    - Console output with timestamps and module names
    - Configurable log level for dbauth modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    settings = get_settings()
    log_level_str = settings.log_level.upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("dbauth").setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the auth tables on startup, dispose the engine on shutdown."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(AuthBase.metadata.create_all)
    logger.info("Auth tables ready")
    yield
    await engine.dispose()


def create_app(settings: Settings | None = None, create_tables: bool = True) -> FastAPI:
    """Create the FastAPI application.

    Parameters
    ----------
    settings
        Settings to serve with. Defaults to the cached settings.
    create_tables
        Create the auth tables on startup
    """
    configure_logging()
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan if create_tables else None,
    )
    app.dependency_overrides[get_api_settings] = lambda: settings

    setup_exception_handlers(app)
    app.include_router(
        auth_router,
        prefix=settings.auth_route_prefix,
        tags=["Authentication"],
    )

    logger.info("Serving auth at %s", settings.auth_route_prefix)
    return app
