"""HTTP-shaped responses produced by the handler."""

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthResponse:
    """Response in the ``{statusCode, body, headers}`` shape."""

    status_code: int
    body: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "body": self.body,
            "headers": dict(self.headers),
        }

    def json(self) -> Any:
        """The body parsed as JSON."""
        return json.loads(self.body) if self.body else None


def _serialize(body: Any) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body, default=str)


def ok(
    body: Any,
    headers: dict[str, str] | None = None,
    status_code: int = 200,
) -> AuthResponse:
    """Success response. Non-string bodies are serialized to JSON."""
    return AuthResponse(
        status_code=status_code,
        body=_serialize(body),
        headers=dict(headers or {}),
    )


def not_found() -> AuthResponse:
    return AuthResponse(status_code=404)


def bad_request(message: str) -> AuthResponse:
    return AuthResponse(
        status_code=400,
        body=json.dumps({"message": message}),
    )
