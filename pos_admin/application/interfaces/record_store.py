"""Abstract storage interface (port) for the mock backend's record tables."""

from abc import ABC, abstractmethod
from typing import Any


class RecordStore(ABC):
    """Port for record persistence behind the mock backend, one table per resource.

    Keys are compared as text so that ``/api/tables/7`` finds ``{"id": 7}``.
    Key lookups skip soft-deleted rows (``ActiveStatus = 0``), so a code added
    again after a delete addresses the new row.
    """

    @abstractmethod
    async def get_all(self, resource: str) -> list[dict[str, Any]]:
        """Retrieve every stored record of a resource, including soft-deleted ones."""
        ...

    @abstractmethod
    async def get_by_key(self, resource: str, key_field: str, key: str) -> dict[str, Any] | None:
        """Retrieve the live record whose ``key_field`` equals ``key``."""
        ...

    @abstractmethod
    async def insert(self, resource: str, record: dict[str, Any]) -> dict[str, Any]:
        """Append a record and return it."""
        ...

    @abstractmethod
    async def replace(
        self, resource: str, key_field: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Replace the live record with that key. Returns None if not found."""
        ...

    @abstractmethod
    async def next_id(self, resource: str, key_field: str) -> int:
        """Allocate the next surrogate value of ``key_field`` for a resource."""
        ...
