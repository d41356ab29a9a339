"""FastAPI integration for dbauth."""

from dbauth.presentation.api.app import configure_logging, create_app
from dbauth.presentation.api.dependencies import (
    AuthOptions,
    CurrentUser,
    VerifiedWebhook,
    get_auth_options,
    get_db_session,
    require_current_user,
    require_webhook_signature,
)
from dbauth.presentation.api.exception_handlers import setup_exception_handlers
from dbauth.presentation.api.router import router

__all__ = [
    "AuthOptions",
    "CurrentUser",
    "VerifiedWebhook",
    "configure_logging",
    "create_app",
    "get_auth_options",
    "get_db_session",
    "require_current_user",
    "require_webhook_signature",
    "router",
    "setup_exception_handlers",
]
