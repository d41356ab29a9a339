"""SQLAlchemy implementation for dbauth persistence.

Provides:
- AuthBase: Declarative base for auth models
- UserModel: SQLAlchemy model for user records
- CredentialStoreSQLAlchemy: CredentialStore implementation

Note: The consuming application should include AuthBase.metadata
in its Alembic migrations to create the users table.
"""

from dbauth.persistence.sqlalchemy.base import AuthBase
from dbauth.persistence.sqlalchemy.models import UserModel
from dbauth.persistence.sqlalchemy.store import CredentialStoreSQLAlchemy

__all__ = [
    "AuthBase",
    "CredentialStoreSQLAlchemy",
    "UserModel",
]
