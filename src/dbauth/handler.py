"""Cookie-session authentication handler.

One DbAuthHandler is built per inbound request. It reads the session
cookie and CSRF header once, resolves which auth method the request is
calling, runs it against the credential store and formats the result.
Nothing is shared between handlers, so concurrent requests never see
each other's state.

Usage:
    handler = DbAuthHandler(event, options)
    response = await handler.invoke()
    return response.to_dict()
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timedelta, timezone
from functools import cached_property
from typing import Any

from dbauth.exceptions import (
    DbAuthError,
    DuplicateUsernameError,
    FieldRequiredError,
    IncorrectPasswordError,
    MethodNotSpecifiedError,
    NotLoggedInError,
    SessionDecryptionError,
    UnknownMethodError,
    UserNotFoundError,
    UsernameAndPasswordRequiredError,
    WrongVerbError,
)
from dbauth.repositories import CredentialStore, UserRecord
from dbauth.responses import AuthResponse, bad_request, not_found, ok
from dbauth.schemas import (
    AuthMethod,
    AuthRequest,
    DbAuthOptions,
    SessionData,
    VerbResult,
)
from dbauth.services import (
    JWTService,
    PasswordHasher,
    SessionCookieCodec,
    new_csrf_token,
    validate_csrf,
)
from dbauth_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

CSRF_RESPONSE_HEADER = "X-CSRF-Token"


def _message_body(message: str) -> str:
    return json.dumps({"message": message}, separators=(",", ":"))


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def resolve_auth_method(request: AuthRequest, route_prefix: str) -> AuthMethod:
    """Work out which auth method a request is calling.

    Checked in order, first match wins:
    1. The path segment following ``route_prefix`` (``/auth/login``)
    2. The ``method`` query string parameter
    3. The ``method`` field of a JSON body

    Raises
    ------
    MethodNotSpecifiedError
        If none of these name a method
    UnknownMethodError
        If the named method is not one we handle
    """
    name = None

    path = request.path.rstrip("/")
    marker = route_prefix.rstrip("/") + "/"
    if marker in path + "/":
        _, _, tail = (path + "/").rpartition(marker)
        tail = tail.strip("/")
        if tail and "/" not in tail:
            name = tail

    if name is None:
        name = request.query_string_parameters.get("method") or None

    if name is None:
        method = request.params.get("method")
        name = method if isinstance(method, str) and method else None

    if name is None:
        raise MethodNotSpecifiedError

    try:
        return AuthMethod(name)
    except ValueError as e:
        raise UnknownMethodError(name) from e


class DbAuthHandler:
    """Dispatches one auth request: login, logout, signup or getToken.

    Parameters
    ----------
    request
        The inbound request, or a lambda-style event dict
    options
        Store, field names and signup hook
    settings
        Secrets, cookie host and defaults. Uses the cached settings if
        omitted.
    """

    def __init__(
        self,
        request: AuthRequest | Mapping[str, Any],
        options: DbAuthOptions,
        settings: Settings | None = None,
    ):
        if not isinstance(request, AuthRequest):
            request = AuthRequest.from_event(request)
        settings = settings or get_settings()

        self.request = request
        self.options = options
        self.settings = settings
        self.params = request.params
        self.header_csrf_token = request.header(settings.csrf_header_name)

        secret = options.session_secret
        if secret is None:
            secret = settings.session_secret.get_secret_value()
        self._secret = secret
        self._codec = SessionCookieCodec(
            secret=secret,
            site_host=options.site_host or settings.site_host,
        )
        self._hasher = PasswordHasher(
            iterations=settings.password_hash_iterations,
            algorithm=settings.password_hash_algorithm,
        )
        self._login_expires = options.login_expires or timedelta(
            seconds=settings.login_expires_seconds,
        )

    # Session state

    @cached_property
    def session(self) -> SessionData | None:
        """The decrypted session, or None if the request has none.

        Raises
        ------
        SessionDecryptionError
            If the session cookie is present but unreadable
        """
        return self._codec.decrypt(self.request.header("cookie"))

    @property
    def session_csrf_token(self) -> str | None:
        return self.session.csrf_token if self.session else None

    @cached_property
    def db_accessor(self) -> CredentialStore:
        try:
            return self.options.db[self.options.auth_model_accessor]
        except KeyError as e:
            msg = f"No credential store named {self.options.auth_model_accessor!r}"
            raise ValueError(msg) from e

    @property
    def future_expires_date(self) -> datetime:
        return datetime.now(tz=timezone.utc) + self._login_expires

    @cached_property
    def auth_method(self) -> AuthMethod:
        return resolve_auth_method(self.request, self.settings.auth_route_prefix)

    # Entry point

    async def invoke(self) -> AuthResponse:
        """Run the requested auth method and format its response."""
        try:
            self.session  # NOQA: B018
        except SessionDecryptionError:
            # An unreadable cookie is cleared rather than reported
            return ok(*self.logout())
        except DbAuthError as e:
            logger.error("Cannot read session: %s", e.message)
            return bad_request(e.message)

        try:
            method = self.auth_method
            if self.request.http_method.upper() != method.http_verb:
                raise WrongVerbError(method.value)
        except (MethodNotSpecifiedError, UnknownMethodError, WrongVerbError) as e:
            logger.debug("Auth request not routable: %s", e.message)
            return not_found()

        try:
            result = await self._dispatch(method)
        except DbAuthError as e:
            logger.info("Auth method %s failed: %s", method.value, e.message)
            return bad_request(e.message)
        except Exception as e:
            logger.warning("Auth method %s raised %r", method.value, e)
            return bad_request(str(e))

        return ok(result.body, result.headers, result.status_code)

    async def _dispatch(self, method: AuthMethod) -> VerbResult:
        verbs: dict[AuthMethod, Callable[[], Awaitable[VerbResult]]] = {
            AuthMethod.GET_TOKEN: self.get_token,
            AuthMethod.LOGIN: self.login,
            AuthMethod.LOGOUT: self._logout,
            AuthMethod.SIGNUP: self.signup,
        }
        return await verbs[method]()

    # Verbs

    async def login(self) -> VerbResult:
        """Check credentials and start a session.

        Returns the user's id as the body, the session cookie and the new
        CSRF token as headers.
        """
        user = await self.verify_user(
            self.params.get("username"),
            self.params.get("password"),
        )
        session_data = {"id": user[self.options.auth_fields.id]}
        csrf_token = new_csrf_token()

        headers = {
            CSRF_RESPONSE_HEADER: csrf_token,
            **self.create_session_header(session_data, csrf_token),
        }
        logger.info("User logged in: %s", self.params.get("username"))
        return VerbResult(session_data, headers)

    def logout(self, message: str | None = None) -> VerbResult:
        """Clear the session cookie, optionally with a message body."""
        body = _message_body(message) if message is not None else ""
        return VerbResult(body, self.delete_session_header())

    async def _logout(self) -> VerbResult:
        return self.logout()

    async def signup(self) -> VerbResult:
        """Create a user through the configured signup handler."""
        user = await self.create_user()
        logger.info("User signed up: %s", self.params.get("username"))
        return VerbResult(user, {})

    async def get_token(self) -> VerbResult:
        """Exchange a valid session for a signed bearer token.

        No session gives an empty body. Any other failure is reported
        as a ``{"message": ...}`` body rather than an error status.
        """
        try:
            user = await self.get_current_user()
        except NotLoggedInError:
            return VerbResult("", {})
        except Exception as e:
            message = e.message if isinstance(e, DbAuthError) else str(e)
            logger.info("getToken could not resolve user: %s", message)
            return VerbResult(_message_body(message), {})

        jwt_service = JWTService(
            secret_key=self._secret,
            expire_hours=self.settings.jwt_expire_hours,
        )
        token = jwt_service.create_token(user[self.options.auth_fields.id])
        return VerbResult(token, {})

    # Identity

    async def get_current_user(self) -> UserRecord:
        """The user named by the session, without excluded fields.

        Raises
        ------
        NotLoggedInError
            If there is no session or it holds no user id
        UserNotFoundError
            If the id does not resolve to a user
        """
        session = self.session
        payload = session.payload if session else None
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise NotLoggedInError

        user = await self.db_accessor.find_unique(
            {self.options.auth_fields.id: payload["id"]},
        )
        if user is None:
            raise UserNotFoundError

        excluded = set(self.options.excluded_fields)
        return {k: v for k, v in user.items() if k not in excluded}

    async def authenticate(self) -> UserRecord:
        """Current user for a state-changing request, after a CSRF check.

        Raises
        ------
        NotLoggedInError
            If there is no session
        CsrfTokenMismatchError
            If the CSRF header does not echo the session token
        """
        if self.session is None:
            raise NotLoggedInError
        self.validate_csrf()
        return await self.get_current_user()

    def validate_csrf(self) -> bool:
        return validate_csrf(self.session_csrf_token, self.header_csrf_token)

    async def verify_user(self, username: Any, password: Any) -> UserRecord:
        """Find the user and check their password.

        Raises
        ------
        UsernameAndPasswordRequiredError
            If either value is missing or blank
        UserNotFoundError
            If no user has that username
        IncorrectPasswordError
            If the password does not match
        """
        if _is_blank(username) or _is_blank(password):
            raise UsernameAndPasswordRequiredError

        fields = self.options.auth_fields
        user = await self.db_accessor.find_unique({fields.username: username})
        if user is None:
            logger.warning("Login attempt for unknown username")
            raise UserNotFoundError

        if not self._hasher.verify(
            password,
            user.get(fields.hashed_password) or "",
            user.get(fields.salt) or "",
        ):
            logger.warning("Incorrect password for user %s", user.get(fields.id))
            raise IncorrectPasswordError

        return user

    async def create_user(self) -> Mapping[str, Any]:
        """Validate signup input and hand it to the signup handler.

        Raises
        ------
        FieldRequiredError
            If username or password is missing or blank
        DuplicateUsernameError
            If the username is taken
        """
        params = dict(self.params)
        username = params.pop("username", None)
        password = params.pop("password", None)
        self._validate_field("username", username)
        self._validate_field("password", password)

        fields = self.options.auth_fields
        if await self.db_accessor.find_unique({fields.username: username}):
            raise DuplicateUsernameError(username)

        hashed_password, salt = self._hasher.hash(password)
        user = self.options.signup_handler(
            username=username,
            hashed_password=hashed_password,
            salt=salt,
            user_attributes=params,
        )
        if inspect.isawaitable(user):
            user = await user
        return user

    def _validate_field(self, name: str, value: Any) -> bool:
        if _is_blank(value):
            raise FieldRequiredError(name)
        return True

    # Headers

    def create_session_header(
        self,
        data: Mapping[str, Any],
        csrf_token: str,
    ) -> dict[str, str]:
        cookie = self._codec.encrypt(dict(data), csrf_token, self.future_expires_date)
        return {"Set-Cookie": cookie}

    def delete_session_header(self) -> dict[str, str]:
        return {"Set-Cookie": self._codec.delete_cookie()}
