"""dbauth - Cookie-session authentication with signed webhooks.

This package authenticates users against a pluggable credential store
using an encrypted session cookie. It handles:
- Login, logout, signup and bearer token exchange (DbAuthHandler)
- Salted password hashing (PBKDF2)
- Encrypted session cookies (Fernet) with double-submit CSRF tokens
- HMAC-signed webhook verification with a replay window

Architecture:
    dbauth/
    ├── handler.py          # Request dispatcher
    ├── services/           # Pure logic (hashing, cookies, CSRF, JWT, webhooks)
    ├── repositories/       # Abstract store interface
    ├── persistence/        # Store implementations (memory, sqlalchemy)
    ├── presentation/api/   # FastAPI integration
    ├── responses.py        # HTTP-shaped results
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    from dbauth import DbAuthHandler, DbAuthOptions

    options = DbAuthOptions(db={"user": store}, signup_handler=signup)
    response = await DbAuthHandler(event, options).invoke()
"""

from dbauth.exceptions import (
    CsrfTokenMismatchError,
    DbAuthError,
    DuplicateUsernameError,
    FieldRequiredError,
    ForbiddenError,
    IncorrectPasswordError,
    MethodNotSpecifiedError,
    NotLoggedInError,
    SessionDecryptionError,
    SessionSecretMissingError,
    UnknownMethodError,
    UserNotFoundError,
    UsernameAndPasswordRequiredError,
    WrongVerbError,
)
from dbauth.handler import DbAuthHandler, resolve_auth_method
from dbauth.repositories import CredentialStore
from dbauth.responses import AuthResponse, bad_request, not_found, ok
from dbauth.schemas import (
    AuthFields,
    AuthMethod,
    AuthRequest,
    DbAuthOptions,
    SessionData,
    SignupHandler,
    VerbResult,
)
from dbauth.services import (
    JWTService,
    PasswordHasher,
    SessionCookieCodec,
    new_csrf_token,
    sign,
    validate_csrf,
    verify_event,
    verify_signature,
)
from dbauth.signup import make_signup_handler

__all__ = [
    # Handler
    "DbAuthHandler",
    "resolve_auth_method",
    # Services
    "JWTService",
    "PasswordHasher",
    "SessionCookieCodec",
    "new_csrf_token",
    "sign",
    "validate_csrf",
    "verify_event",
    "verify_signature",
    # Repositories (interfaces)
    "CredentialStore",
    "make_signup_handler",
    # Schemas
    "AuthFields",
    "AuthMethod",
    "AuthRequest",
    "AuthResponse",
    "DbAuthOptions",
    "SessionData",
    "SignupHandler",
    "VerbResult",
    "bad_request",
    "not_found",
    "ok",
    # Exceptions
    "CsrfTokenMismatchError",
    "DbAuthError",
    "DuplicateUsernameError",
    "FieldRequiredError",
    "ForbiddenError",
    "IncorrectPasswordError",
    "MethodNotSpecifiedError",
    "NotLoggedInError",
    "SessionDecryptionError",
    "SessionSecretMissingError",
    "UnknownMethodError",
    "UserNotFoundError",
    "UsernameAndPasswordRequiredError",
    "WrongVerbError",
]
