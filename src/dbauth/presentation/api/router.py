"""Auth router exposing the DbAuthHandler over HTTP.

Mounted under the configured auth route prefix. The method can be the
last path segment (``/auth/login``), a ``method`` query parameter or a
``method`` field in the JSON body.
"""

import logging

from fastapi import APIRouter, Request, Response

from dbauth.handler import DbAuthHandler
from dbauth.presentation.api.dependencies import (
    AuthOptions,
    DBSession,
    SettingsDep,
    auth_request_from,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _invoke(
    request: Request,
    options: AuthOptions,
    session: DBSession,
    settings: SettingsDep,
) -> Response:
    handler = DbAuthHandler(await auth_request_from(request), options, settings)
    result = await handler.invoke()

    if result.status_code < 400:
        await session.commit()
    else:
        await session.rollback()

    return Response(
        content=result.body or b"",
        status_code=result.status_code,
        headers=result.headers,
    )


@router.api_route(
    "",
    methods=["GET", "POST"],
    summary="Auth method given by query string or body",
)
async def auth(
    request: Request,
    options: AuthOptions,
    session: DBSession,
    settings: SettingsDep,
) -> Response:
    return await _invoke(request, options, session, settings)


@router.api_route(
    "/{method}",
    methods=["GET", "POST"],
    summary="Auth method given by path",
    responses={
        200: {"description": "Method ran"},
        400: {"description": "Method failed, body holds the message"},
        404: {"description": "Unknown method or wrong HTTP verb"},
    },
)
async def auth_method(
    method: str,
    request: Request,
    options: AuthOptions,
    session: DBSession,
    settings: SettingsDep,
) -> Response:
    return await _invoke(request, options, session, settings)
