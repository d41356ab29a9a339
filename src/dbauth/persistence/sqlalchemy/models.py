"""SQLAlchemy model for user records.

Column names follow the default AuthFields so the model works with a
default-configured handler.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dbauth.persistence.sqlalchemy.base import AuthBase


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


class UserModel(AuthBase):
    """
    User record with credential fields.

    Table: users
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # PBKDF2 hex digest (64 chars) and hex salt (32 chars)
    hashedPassword: Mapped[str] = mapped_column(String(64), nullable=False)  # NOQA: N815
    salt: Mapped[str] = mapped_column(String(64), nullable=False)

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<UserModel(id={self.id}, email={self.email})>"
