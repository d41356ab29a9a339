"""Data structures passed between the dbauth components.

These are plain value objects. Anything that lives for one request
(the inbound event, the decrypted session) is frozen so it cannot leak
state into the next request.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol

if TYPE_CHECKING:
    from dbauth.repositories import CredentialStore


class AuthMethod(str, Enum):
    """Auth methods the dispatcher knows how to run."""

    GET_TOKEN = "getToken"
    LOGIN = "login"
    LOGOUT = "logout"
    SIGNUP = "signup"

    @property
    def http_verb(self) -> str:
        """The HTTP verb a request must use to call this method."""
        return "GET" if self is AuthMethod.GET_TOKEN else "POST"


class SignupHandler(Protocol):
    """Creates the user record during signup.

    Receives the already hashed password and its salt. May be sync or
    async, and may raise its own error to reject the signup.
    """

    def __call__(
        self,
        *,
        username: str,
        hashed_password: str,
        salt: str,
        user_attributes: dict[str, Any],
    ) -> Mapping[str, Any] | Awaitable[Mapping[str, Any]]: ...


@dataclass(frozen=True)
class AuthFields:
    """Names of the user record fields the handler understands."""

    id: str = "id"
    username: str = "email"
    hashed_password: str = "hashedPassword"
    salt: str = "salt"


@dataclass(frozen=True)
class DbAuthOptions:
    """Configuration for a DbAuthHandler.

    Attributes
    ----------
    db
        Mapping of accessor name to credential store
    signup_handler
        Creates the user record during signup
    auth_model_accessor
        Key into ``db`` for the store holding user records
    auth_fields
        Field names for id, username, hashed password and salt
    exclude_user_fields
        Fields removed from the current user before it is returned.
        Defaults to the hashed password and salt fields.
    login_expires
        Session lifetime. Defaults to the configured setting.
    session_secret
        Overrides the configured session secret
    site_host
        Overrides the host derived from the configured site URL
    """

    db: Mapping[str, CredentialStore]
    signup_handler: SignupHandler
    auth_model_accessor: str = "user"
    auth_fields: AuthFields = field(default_factory=AuthFields)
    exclude_user_fields: tuple[str, ...] | None = None
    login_expires: timedelta | None = None
    session_secret: str | None = None
    site_host: str | None = None

    @property
    def excluded_fields(self) -> tuple[str, ...]:
        if self.exclude_user_fields is not None:
            return tuple(self.exclude_user_fields)
        return (self.auth_fields.hashed_password, self.auth_fields.salt)


@dataclass(frozen=True)
class AuthRequest:
    """Inbound request event.

    Header names are lower-cased on construction so lookups are
    case-insensitive.
    """

    path: str = ""
    http_method: str = ""
    query_string_parameters: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        lowered = {str(k).lower(): v for k, v in (self.headers or {}).items()}
        object.__setattr__(self, "headers", lowered)
        object.__setattr__(
            self,
            "query_string_parameters",
            dict(self.query_string_parameters or {}),
        )

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> AuthRequest:
        """Build a request from a lambda-style event dictionary."""
        return cls(
            path=event.get("path") or "",
            http_method=event.get("httpMethod") or "",
            query_string_parameters=event.get("queryStringParameters") or {},
            body=event.get("body"),
            headers=event.get("headers") or {},
        )

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    @property
    def params(self) -> dict[str, Any]:
        """The JSON body as a dict, or an empty dict if it is not one."""
        if not self.body:
            return {}
        try:
            parsed = json.loads(self.body)
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}


@dataclass(frozen=True)
class SessionData:
    """Decrypted session cookie contents."""

    payload: dict[str, Any]
    csrf_token: str


class VerbResult(NamedTuple):
    """What an auth verb hands to the response formatter."""

    body: Any
    headers: dict[str, str]
    status_code: int = 200
