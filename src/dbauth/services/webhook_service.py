"""Signed webhook verification.

A signed request carries a header of the form ``t=<ms>,v1=<hex>``. The
signature is HMAC-SHA256 over ``"<t>." + body``, so the timestamp
cannot be changed without invalidating it. Signatures older (or newer)
than the tolerance are rejected to bound replays.

Every failure raises the same ForbiddenError so a caller cannot tell
which check failed.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import time
from typing import TYPE_CHECKING

from dbauth.exceptions import ForbiddenError
from dbauth_config.settings import Settings, get_settings

if TYPE_CHECKING:
    from dbauth.schemas import AuthRequest

logger = logging.getLogger(__name__)

FIVE_MINUTES_MS = 5 * 60 * 1000
DEFAULT_TOLERANCE_MS = FIVE_MINUTES_MS

_SIGNATURE_PATTERN = re.compile(r"t=(\d+),v1=([\da-f]+)")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _digest(secret: str, timestamp: int, body: str | bytes) -> str:
    if not secret:
        raise ForbiddenError
    if isinstance(body, str):
        body = body.encode("utf-8")
    message = str(timestamp).encode("ascii") + b"." + body
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def sign(body: str | bytes, secret: str, timestamp: int | None = None) -> str:
    """Produce a signature header value for ``body``.

    Parameters
    ----------
    body
        The exact payload that will be sent
    secret
        Shared signing secret
    timestamp
        Signing time in milliseconds. Defaults to now.

    Returns
    -------
    The header value, ``t=<timestamp>,v1=<hex digest>``

    Raises
    ------
    ForbiddenError
        If the secret is empty
    """
    if timestamp is None:
        timestamp = _now_ms()
    return f"t={timestamp},v1={_digest(secret, timestamp, body)}"


def verify_signature(
    body: str | bytes,
    signature: str | None,
    secret: str,
    tolerance: int | None = None,
    timestamp: int | None = None,
) -> bool:
    """Verify that ``body`` was signed with ``secret`` recently enough.

    Parameters
    ----------
    body
        The raw request payload, unparsed
    signature
        The signature header value
    secret
        Shared signing secret
    tolerance
        Allowed difference in milliseconds between the signed time and
        ``timestamp`` (default five minutes)
    timestamp
        Time of the check in milliseconds. Defaults to now.

    Returns
    -------
    True if the signature is valid

    Raises
    ------
    ForbiddenError
        If the header is malformed, the secret is empty, the timestamp is
        outside the tolerance, or the digest does not match
    """
    match = _SIGNATURE_PATTERN.fullmatch((signature or "").strip())
    if match is None:
        logger.warning("Rejected webhook: malformed signature header")
        raise ForbiddenError

    signed_stamp = int(match.group(1))
    received = match.group(2)

    if timestamp is None:
        timestamp = _now_ms()
    if tolerance is None:
        tolerance = DEFAULT_TOLERANCE_MS

    expected = _digest(secret, signed_stamp, body)

    if abs(timestamp - signed_stamp) > tolerance:
        logger.warning(
            "Rejected webhook: signature timestamp outside tolerance of %d ms",
            tolerance,
        )
        raise ForbiddenError

    if not hmac.compare_digest(expected.encode("ascii"), received.encode("ascii")):
        logger.warning("Rejected webhook: signature mismatch")
        raise ForbiddenError

    return True


def verify_event(
    request: AuthRequest,
    settings: Settings | None = None,
    tolerance: int | None = None,
    timestamp: int | None = None,
) -> bool:
    """Verify a signed inbound request using configured header and secret.

    Raises
    ------
    ForbiddenError
        If the request is not correctly signed
    """
    settings = settings or get_settings()
    if tolerance is None:
        tolerance = settings.webhook_tolerance_ms
    return verify_signature(
        body=request.body or "",
        signature=request.header(settings.webhook_signature_header),
        secret=settings.webhook_secret.get_secret_value(),
        tolerance=tolerance,
        timestamp=timestamp,
    )
