"""Exception handlers for routes that use the dbauth dependencies.

The auth router formats its own errors. These handlers cover routes
that depend on ``require_current_user`` or ``require_webhook_signature``.

Error Response Format:
    {
        "message": "Human-readable error message"
    }
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dbauth.exceptions import (
    CsrfTokenMismatchError,
    DbAuthError,
    ForbiddenError,
    NotLoggedInError,
    SessionDecryptionError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

ERROR_TO_STATUS: dict[type[DbAuthError], int] = {
    NotLoggedInError: status.HTTP_401_UNAUTHORIZED,
    UserNotFoundError: status.HTTP_401_UNAUTHORIZED,
    CsrfTokenMismatchError: status.HTTP_403_FORBIDDEN,
    SessionDecryptionError: status.HTTP_403_FORBIDDEN,
}


def _get_status_for_exception(exc: DbAuthError) -> int:
    for error_type, status_code in ERROR_TO_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the dbauth exception handlers on the application.

    Parameters
    ----------
    app
        The FastAPI application instance
    """

    @app.exception_handler(DbAuthError)
    async def dbauth_exception_handler(
        request: Request,
        exc: DbAuthError,
    ) -> JSONResponse:
        status_code = _get_status_for_exception(exc)
        logger.warning(
            "Auth error on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
        )
        return JSONResponse(status_code=status_code, content={"message": exc.message})

    @app.exception_handler(ForbiddenError)
    async def forbidden_exception_handler(
        request: Request,
        exc: ForbiddenError,
    ) -> JSONResponse:
        logger.warning(
            "Rejected unsigned request on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"message": exc.message},
        )
