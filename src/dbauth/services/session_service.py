"""Session cookie encryption and parsing.

The session lives entirely in one encrypted cookie. Its plaintext is
``JSON(payload) + ";" + csrf_token``; since a CSRF token never contains
``;`` the plaintext is split on the last one.
"""

import base64
import binascii
import hashlib
import json
import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from dbauth.exceptions import SessionDecryptionError, SessionSecretMissingError
from dbauth.schemas import SessionData

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"
SESSION_DELIMITER = ";"
PAST_EXPIRES_DATE = "Thu, 01 Jan 1970 00:00:00 GMT"


def parse_cookie_value(cookie_header: str | None, name: str) -> str | None:
    """Find a cookie's value in a ``Cookie`` header.

    Pairs may be separated by ``;`` or ``; ``. Names must match exactly.
    Returns None if the cookie is not present.
    """
    if not cookie_header:
        return None
    for pair in cookie_header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key == name:
            return value
    return None


def http_date(moment: datetime) -> str:
    """Format a datetime as an RFC 1123 date in GMT."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


class SessionCookieCodec:
    """Encrypts session data into a ``Set-Cookie`` value and back.

    Uses Fernet (AES + HMAC) keyed by a SHA-256 digest of the session
    secret, so any non-empty secret string works. The Fernet token is
    re-encoded in the standard base64 alphabet for the cookie value.
    """

    def __init__(self, secret: str, site_host: str):
        self._secret = secret
        self._site_host = site_host
        self._fernet: Fernet | None = None

    @property
    def fernet(self) -> Fernet:
        if self._fernet is None:
            if not self._secret:
                raise SessionSecretMissingError
            digest = hashlib.sha256(self._secret.encode("utf-8")).digest()
            self._fernet = Fernet(base64.urlsafe_b64encode(digest))
        return self._fernet

    def encrypt_value(self, payload: Any, csrf_token: str) -> str:
        """Encrypt session data into a bare cookie value."""
        if SESSION_DELIMITER in csrf_token:
            msg = f"CSRF token must not contain {SESSION_DELIMITER!r}"
            raise ValueError(msg)
        plaintext = json.dumps(payload, separators=(",", ":"))
        plaintext = plaintext + SESSION_DELIMITER + csrf_token
        token = self.fernet.encrypt(plaintext.encode("utf-8"))
        return base64.b64encode(base64.urlsafe_b64decode(token)).decode("ascii")

    def decrypt_value(self, value: str) -> SessionData:
        """Decrypt a bare cookie value.

        Raises
        ------
        SessionDecryptionError
            If the value is not ours (wrong key, tampered, malformed)
        """
        try:
            raw = base64.b64decode(value, validate=True)
            plaintext = self.fernet.decrypt(base64.urlsafe_b64encode(raw))
            payload_json, sep, csrf_token = plaintext.decode("utf-8").rpartition(
                SESSION_DELIMITER,
            )
            if not sep:
                raise SessionDecryptionError
            payload = json.loads(payload_json)
        except (InvalidToken, binascii.Error, UnicodeDecodeError, ValueError) as e:
            logger.warning("Could not decrypt session cookie: %s", type(e).__name__)
            raise SessionDecryptionError from e

        return SessionData(payload=payload, csrf_token=csrf_token)

    def decrypt(self, cookie_header: str | None) -> SessionData | None:
        """Read the session out of a ``Cookie`` header.

        Returns None if there is no session cookie or it is empty.

        Raises
        ------
        SessionDecryptionError
            If the session cookie is present but cannot be decrypted
        """
        value = parse_cookie_value(cookie_header, SESSION_COOKIE_NAME)
        if not value:
            return None
        return self.decrypt_value(value)

    def cookie_attributes(self, expires: str) -> list[str]:
        return [
            "Path=/",
            f"Domain={self._site_host}",
            "HttpOnly",
            "SameSite=Strict",
            "Secure",
            f"Expires={expires}",
        ]

    def encrypt(self, payload: Any, csrf_token: str, expires_at: datetime) -> str:
        """Build the ``Set-Cookie`` value that creates a session."""
        value = self.encrypt_value(payload, csrf_token)
        attributes = self.cookie_attributes(http_date(expires_at))
        return ";".join([f"{SESSION_COOKIE_NAME}={value}", *attributes])

    def delete_cookie(self) -> str:
        """Build the ``Set-Cookie`` value that expires the session."""
        attributes = self.cookie_attributes(PAST_EXPIRES_DATE)
        return ";".join([f"{SESSION_COOKIE_NAME}=", *attributes])
