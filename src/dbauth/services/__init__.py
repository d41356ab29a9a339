"""Authentication services.

Provides password hashing, session cookies, CSRF tokens, JWT bearer
tokens and webhook signatures.
"""

from dbauth.services.csrf_service import new_csrf_token, validate_csrf
from dbauth.services.jwt_service import InvalidTokenError, JWTService
from dbauth.services.password_service import PasswordHasher
from dbauth.services.session_service import (
    PAST_EXPIRES_DATE,
    SessionCookieCodec,
    parse_cookie_value,
)
from dbauth.services.webhook_service import sign, verify_event, verify_signature

__all__ = [
    "PAST_EXPIRES_DATE",
    "InvalidTokenError",
    "JWTService",
    "PasswordHasher",
    "SessionCookieCodec",
    "new_csrf_token",
    "parse_cookie_value",
    "sign",
    "validate_csrf",
    "verify_event",
    "verify_signature",
]
