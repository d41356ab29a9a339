"""CSRF tokens for the double-submit pattern.

The token is minted at login, stored inside the encrypted session and
sent to the client in a header. Later requests must echo it back.
"""

import hmac
import uuid

from dbauth.exceptions import CsrfTokenMismatchError


def new_csrf_token() -> str:
    """Return a fresh, unique CSRF token (a UUID4 string)."""
    return str(uuid.uuid4())


def validate_csrf(session_token: str | None, header_token: str | None) -> bool:
    """Check that the header token echoes the session token.

    Raises
    ------
    CsrfTokenMismatchError
        If either token is missing or they differ
    """
    if not session_token or not header_token:
        raise CsrfTokenMismatchError
    if not hmac.compare_digest(
        session_token.encode("utf-8"),
        header_token.encode("utf-8"),
    ):
        raise CsrfTokenMismatchError
    return True
