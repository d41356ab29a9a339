"""SQLAlchemy implementation of CredentialStore.

Works over any mapped model class; records cross the boundary as plain
dicts of column name to value. Changes are flushed, never committed:
the caller owns the transaction.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from dbauth.persistence.sqlalchemy.models import UserModel
from dbauth.repositories import CredentialStore, UserRecord, single_condition

logger = logging.getLogger(__name__)


class CredentialStoreSQLAlchemy(CredentialStore):
    """
    SQLAlchemy implementation of CredentialStore.

    A duplicate username that slips past the handler's existence check
    surfaces as the IntegrityError raised by the unique constraint.
    """

    def __init__(self, session: AsyncSession, model: type = UserModel):
        """Initialize store with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        model
            Mapped class holding the user records
        """
        self._session = session
        self._model = model
        self._columns = tuple(
            attr.key for attr in inspect(model).column_attrs
        )

    def _to_record(self, instance: Any) -> UserRecord:
        """Map a model instance to a plain record."""
        return {key: getattr(instance, key) for key in self._columns}

    def _column(self, field: str):
        if field not in self._columns:
            msg = f"{self._model.__name__} has no column {field!r}"
            raise ValueError(msg)
        return getattr(self._model, field)

    async def find_unique(self, where: Mapping[str, Any]) -> UserRecord | None:
        field, value = single_condition(where)
        stmt = select(self._model).where(self._column(field) == value)
        result = await self._session.execute(stmt)
        instance = result.scalar_one_or_none()
        return self._to_record(instance) if instance is not None else None

    async def create(self, data: Mapping[str, Any]) -> UserRecord:
        for field in data:
            self._column(field)
        instance = self._model(**data)
        self._session.add(instance)
        await self._session.flush()
        # Read back stored values so create and find_unique agree (SQLite drops tzinfo)
        await self._session.refresh(instance)
        logger.info("Created %s record", self._model.__name__)
        return self._to_record(instance)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self._model)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def delete_many(self, where: Mapping[str, Any] | None = None) -> int:
        stmt = delete(self._model)
        for field, value in (where or {}).items():
            stmt = stmt.where(self._column(field) == value)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount
