"""Repository interfaces for dbauth.

This package defines the abstract store interface that the handler talks
to. Implementations live in ``dbauth.persistence``.
"""

from dbauth.repositories.credential_store import (
    CredentialStore,
    UserRecord,
    single_condition,
)

__all__ = ["CredentialStore", "UserRecord", "single_condition"]
