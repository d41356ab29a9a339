"""In-memory credential store.

Useful for tests and demos. Records are copied in and out so callers
cannot mutate stored state by accident.
"""

import itertools
import logging
from collections.abc import Mapping
from typing import Any

from dbauth.repositories import CredentialStore, UserRecord, single_condition

logger = logging.getLogger(__name__)


class InMemoryCredentialStore(CredentialStore):
    """Credential store backed by a list of dicts."""

    def __init__(
        self,
        id_field: str = "id",
        unique_fields: tuple[str, ...] = (),
    ):
        """Initialize an empty store.

        Parameters
        ----------
        id_field
            Field that receives an auto-incremented integer on create
            when the caller does not supply one
        unique_fields
            Fields whose values must be unique, in addition to the id
        """
        self._id_field = id_field
        self._unique_fields = (id_field, *unique_fields)
        self._ids = itertools.count(1)
        self._records: list[UserRecord] = []

    async def find_unique(self, where: Mapping[str, Any]) -> UserRecord | None:
        field, value = single_condition(where)
        for record in self._records:
            if field in record and record[field] == value:
                return dict(record)
        return None

    async def create(self, data: Mapping[str, Any]) -> UserRecord:
        record = dict(data)
        if record.get(self._id_field) is None:
            record[self._id_field] = next(self._ids)

        for field in self._unique_fields:
            if field not in record:
                continue
            if any(r.get(field) == record[field] for r in self._records):
                msg = f"Unique constraint failed on the field: `{field}`"
                raise ValueError(msg)

        self._records.append(record)
        logger.debug("Created record %s", record[self._id_field])
        return dict(record)

    async def count(self) -> int:
        return len(self._records)

    async def delete_many(self, where: Mapping[str, Any] | None = None) -> int:
        where = where or {}
        keep = [
            r
            for r in self._records
            if not all(r.get(k) == v for k, v in where.items())
        ]
        deleted = len(self._records) - len(keep)
        self._records = keep
        return deleted
