"""Result models for the persistent store."""

from enum import Enum

from pydantic import Field

from wikifeed.data_model import StrictBaseModel


class StoreErrorClass(str, Enum):
    """Classification of store write failures.

    - SERIALIZATION: Value could not be encoded as JSON
    - QUOTA_EXCEEDED: Write would exceed the namespace size budget
    - DATABASE: SQLite reported an error
    """

    SERIALIZATION = "SERIALIZATION"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    DATABASE = "DATABASE"


class StoreResult(StrictBaseModel):
    """Outcome of a store write or delete.

    Attributes:
        key: Key that was written or deleted.
        ok: Whether the change was persisted.
        bytes_written: Encoded size of the value (0 for deletes and failures).
        error_class: Failure classification when ``ok`` is False.
        message: Failure description when ``ok`` is False.
    """

    key: str
    ok: bool
    bytes_written: int = Field(default=0, ge=0)
    error_class: StoreErrorClass | None = None
    message: str | None = None

    @classmethod
    def success(cls, key: str, bytes_written: int = 0) -> "StoreResult":
        """Build a successful result."""
        return cls(key=key, ok=True, bytes_written=bytes_written)

    @classmethod
    def failure(
        cls, key: str, error_class: StoreErrorClass, message: str
    ) -> "StoreResult":
        """Build a failed result."""
        return cls(key=key, ok=False, error_class=error_class, message=message)
