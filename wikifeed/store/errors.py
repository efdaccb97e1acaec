"""Domain exceptions for the persistent store.

Only connection misuse escapes the store as an exception; write failures are
reported to callers as ``StoreResult`` values instead.
"""


class StoreError(Exception):
    """Base exception for all persistent store errors."""


class StoreConnectionError(StoreError):
    """Raised when the store is used before ``connect()`` or after ``close()``."""

    def __init__(self, message: str = "Store not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class QuotaExceededError(StoreError):
    """Raised internally when a write would exceed the namespace budget."""

    def __init__(self, key: str, required_bytes: int, max_bytes: int) -> None:
        """Initialize the quota error.

        Args:
            key: Key being written.
            required_bytes: Namespace size the write would produce.
            max_bytes: Configured namespace budget.
        """
        self.key = key
        self.required_bytes = required_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"Writing {key} needs {required_bytes} bytes, budget is {max_bytes}"
        )


class MigrationError(StoreError):
    """Raised when a schema migration fails."""

    def __init__(self, version: int, message: str) -> None:
        """Initialize the migration error.

        Args:
            version: The migration version that failed.
            message: Human-readable error message.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")
