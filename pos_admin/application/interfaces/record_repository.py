"""Abstract repository interface (port) for one entity type's persisted records."""

from abc import ABC, abstractmethod
from typing import Any


class RecordRepository(ABC):
    """Port for the CRUD backend of a single master-data resource.

    Implementations raise ``RepositoryFailure`` (or its subclass
    ``DuplicateKeyViolation``) for both server-reported and transport
    failures; the message is shown to the user verbatim.
    """

    @abstractmethod
    async def list_records(self) -> list[dict[str, Any]]:
        """Return every persisted record in display order."""
        ...

    @abstractmethod
    async def create(self, record: dict[str, Any]) -> dict[str, Any] | None:
        """Persist a new record; returns the stored record when the backend echoes it."""
        ...

    @abstractmethod
    async def update(self, record_id: Any, record: dict[str, Any]) -> None:
        """Replace the record identified by ``record_id``."""
        ...

    @abstractmethod
    async def delete(self, record_id: Any) -> None:
        """Delete the record identified by ``record_id``."""
        ...
