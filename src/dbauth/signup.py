"""Default signup hook that writes straight to a credential store."""

from collections.abc import Iterable, Mapping
from typing import Any

from dbauth.repositories import CredentialStore, UserRecord
from dbauth.schemas import AuthFields, SignupHandler


def make_signup_handler(
    store: CredentialStore,
    fields: AuthFields | None = None,
    attributes: Iterable[str] = ("name",),
) -> SignupHandler:
    """Build a signup hook that creates the record in ``store``.

    Only the credential fields and the listed ``attributes`` are copied
    into the new record; anything else the client posted is ignored.
    """
    fields = fields or AuthFields()
    allowed = tuple(attributes)

    async def signup_handler(
        *,
        username: str,
        hashed_password: str,
        salt: str,
        user_attributes: Mapping[str, Any],
    ) -> UserRecord:
        data = {
            fields.username: username,
            fields.hashed_password: hashed_password,
            fields.salt: salt,
        }
        for name in allowed:
            if name in user_attributes:
                data[name] = user_attributes[name]
        return await store.create(data)

    return signup_handler
