"""Store error types."""

from typing import Optional


class StoreError(Exception):
    """A transport or store failure while talking to the data service."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        record_kind: Optional[str] = None,
    ):
        self.message = message
        self.operation = operation
        self.record_kind = record_kind
        super().__init__(message)

    def __str__(self) -> str:
        if self.operation and self.record_kind:
            return f"{self.record_kind}.{self.operation}: {self.message}"
        return self.message


class RecordNotFoundError(StoreError):
    """Raised when updating or deleting a record that does not exist."""

    def __init__(self, record_kind: str, id: str, operation: Optional[str] = None):
        self.id = id
        super().__init__(f"Record not found: {id}", operation, record_kind)
