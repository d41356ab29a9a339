"""SQLAlchemy declarative base for dbauth models.

This provides a separate Base for auth models. The consuming application
should include AuthBase.metadata in its migration configuration.

Examples
--------
# In Alembic env.py:
from myapp.models import Base
from dbauth.persistence.sqlalchemy import AuthBase

target_metadata = [Base.metadata, AuthBase.metadata]
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for dbauth models."""
