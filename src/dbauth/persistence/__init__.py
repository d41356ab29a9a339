"""Persistence implementations for dbauth.

This package contains implementations of the CredentialStore interface
defined in dbauth.repositories.

Structure:
    persistence/
    ├── memory.py       # In-memory store (tests, demos)
    └── sqlalchemy/     # SQLAlchemy/SQL database implementation
"""

from dbauth.persistence.memory import InMemoryCredentialStore

__all__ = ["InMemoryCredentialStore"]
