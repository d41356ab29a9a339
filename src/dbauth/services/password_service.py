"""Password hashing service using PBKDF2.

The defaults (HMAC-SHA1, one iteration, 32-byte output) reproduce the
hashes already stored by existing deployments. New deployments can pick
SHA-256 and more iterations, but stored hashes only verify with the
settings they were made with.

Salts are stored next to the hash on the user record, so hashing has to
be reproducible from ``(password, salt)`` alone.
"""

import hmac
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


ALGORITHMS = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
}


class PasswordHasher:
    """Service for salted password hashing and verification.

    Examples
    --------
    >>> hasher = PasswordHasher()
    >>> hashed, salt = hasher.hash("my_secure_password")
    >>> hasher.verify("my_secure_password", hashed, salt)
    True
    >>> hasher.verify("wrong_password", hashed, salt)
    False
    """

    SALT_BYTES = 16
    DIGEST_BYTES = 32

    def __init__(self, iterations: int = 1, algorithm: str = "sha1"):
        """Initialize the password hasher.

        Parameters
        ----------
        iterations
            PBKDF2 iteration count. Every stored hash was computed with a
            specific count, so changing it invalidates existing records.
        algorithm
            PBKDF2 digest, ``"sha1"`` (default) or ``"sha256"``
        """
        if iterations < 1:
            msg = "iterations must be at least 1"
            raise ValueError(msg)
        if algorithm not in ALGORITHMS:
            msg = f"Unsupported password hash algorithm {algorithm!r}"
            raise ValueError(msg)
        self._iterations = iterations
        self._algorithm = ALGORITHMS[algorithm]

    def hash(self, password: str, salt: str | None = None) -> tuple[str, str]:
        """Hash a plaintext password.

        Parameters
        ----------
        password
            The plaintext password to hash
        salt
            Hex salt to reuse. A fresh 16-byte salt is generated if omitted.

        Returns
        -------
        Tuple of (hash, salt), both hex encoded. The hash is 64 characters,
        a generated salt is 32.
        """
        if salt is None:
            salt = secrets.token_hex(self.SALT_BYTES)

        kdf = PBKDF2HMAC(
            algorithm=self._algorithm(),
            length=self.DIGEST_BYTES,
            salt=salt.encode("utf-8"),
            iterations=self._iterations,
        )
        digest = kdf.derive(password.encode("utf-8"))
        return digest.hex(), salt

    def verify(self, password: str, hashed_password: str, salt: str) -> bool:
        """Check a password against a stored hash and salt."""
        candidate, _ = self.hash(password, salt)
        return hmac.compare_digest(
            candidate.encode("utf-8"),
            (hashed_password or "").encode("utf-8"),
        )
