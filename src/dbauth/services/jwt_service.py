"""JWT bearer tokens handed out by ``getToken``."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from dbauth.exceptions import DbAuthError


class InvalidTokenError(DbAuthError):
    """Raised when a JWT token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class JWTService:
    """Service for signing and verifying bearer tokens.

    Examples
    --------
    >>> service = JWTService(secret_key="your-secret-key")
    >>> token = service.create_token(user_id=42)
    >>> service.decode_token(token)["id"]
    42
    """

    DEFAULT_EXPIRE_HOURS = 1
    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        expire_hours: int = DEFAULT_EXPIRE_HOURS,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        secret_key
            Secret key for signing tokens. Must be kept secure.
        expire_hours
            Hours until a token expires (default 1)
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._expire = timedelta(hours=expire_hours)

    def create_token(
        self,
        user_id: Any,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed token embedding the user's id.

        Parameters
        ----------
        user_id
            The user's identifier, stored as the ``id`` claim unchanged
        expires_delta
            Custom expiration time (optional)

        Returns
        -------
        The encoded JWT token string
        """
        now = datetime.now(tz=timezone.utc)
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + (expires_delta or self._expire),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Verify and decode a token.

        Raises
        ------
        InvalidTokenError
            If token is invalid, expired, or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if "id" not in payload:
            msg = "Malformed token payload: missing id"
            raise InvalidTokenError(msg)
        return payload
