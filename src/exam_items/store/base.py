"""Abstract record store interface."""

from abc import ABC, abstractmethod
from typing import Optional


class RecordStore(ABC):
    """Abstract interface for one record kind in the data service.

    Records are plain dicts keyed by the store's field names. Every
    implementation raises ``StoreError`` for transport failures.
    """

    record_kind: str = "Record"

    @abstractmethod
    async def list_records(self, filters: Optional[dict] = None) -> list[dict]:
        """List records, optionally where each field equals the given value."""
        pass

    @abstractmethod
    async def get(self, id: str) -> Optional[dict]:
        """Get a record by ID, or None if it does not exist."""
        pass

    @abstractmethod
    async def create(self, fields: dict) -> dict:
        """Create a record and return it with its assigned ID."""
        pass

    @abstractmethod
    async def update(self, id: str, fields: dict) -> dict:
        """Update fields on an existing record and return the stored record."""
        pass

    @abstractmethod
    async def delete(self, id: str) -> None:
        """Delete a record by ID."""
        pass
