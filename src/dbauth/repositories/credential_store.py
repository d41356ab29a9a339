"""Abstract interface for the store holding user records.

The handler never sees the persistence engine. It only needs to look a
record up by one unique field, create one, count them and clear them.
Implementations can use SQLAlchemy, an in-memory dict, or anything else.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

UserRecord = dict[str, Any]


class CredentialStore(ABC):
    """
    Abstract repository interface for user records.

    Records are plain dicts of field name to value. The store decides
    which fields exist; the handler only knows the configured id,
    username, hashed password and salt field names.

    Example implementation:
        class CredentialStoreSQLAlchemy(CredentialStore):
            def __init__(self, session: AsyncSession, model: type):
                self._session = session
                self._model = model

            async def find_unique(self, where: Mapping[str, Any]) -> UserRecord | None:
                # SQLAlchemy-specific implementation
                ...
    """

    @abstractmethod
    async def find_unique(self, where: Mapping[str, Any]) -> UserRecord | None:
        """
        Find the one record matching a unique field.

        Parameters
        ----------
        where
            Single ``{field: value}`` pair

        Returns
        -------
        The record if found, None otherwise
        """

    @abstractmethod
    async def create(self, data: Mapping[str, Any]) -> UserRecord:
        """
        Create a record.

        Parameters
        ----------
        data
            Field values for the new record

        Returns
        -------
        The created record, including any generated id
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of records."""

    @abstractmethod
    async def delete_many(self, where: Mapping[str, Any] | None = None) -> int:
        """
        Delete records matching every ``{field: value}`` pair.

        An empty or missing filter deletes everything.

        Returns
        -------
        The number of records deleted
        """


def single_condition(where: Mapping[str, Any]) -> tuple[str, Any]:
    """Unpack a ``find_unique`` filter, which must name exactly one field."""
    if len(where) != 1:
        msg = f"find_unique expects exactly one field, got {len(where)}"
        raise ValueError(msg)
    ((field, value),) = where.items()
    return field, value
