"""SQLite-backed key-value store for feed state."""

import json
import sqlite3
import time
import uuid
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from wikifeed.store.errors import QuotaExceededError, StoreConnectionError
from wikifeed.store.metrics import StoreMetrics
from wikifeed.store.migrations import CURRENT_VERSION, MigrationManager
from wikifeed.store.models import StoreErrorClass, StoreResult


logger = structlog.get_logger()

IN_MEMORY = ":memory:"

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class KeyValueStore:
    """Namespaced, size-bounded key-value store with JSON values.

    Every value lives in a single ``kv_entries`` table keyed on
    ``(namespace, key)``. The summed encoded size of a namespace never
    exceeds ``max_bytes``; writes that would break the budget are rejected
    and reported through ``StoreResult`` rather than raised.
    """

    def __init__(
        self,
        db_path: Path | str,
        namespace: str = "wikifeed",
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file, or ``":memory:"``.
            namespace: Namespace isolating this store's keys.
            max_bytes: Size budget of the namespace in bytes.
        """
        self._db_path = db_path if db_path == IN_MEMORY else Path(db_path)
        self._namespace = namespace
        self._max_bytes = max_bytes
        self._conn: sqlite3.Connection | None = None
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(
            component="store",
            namespace=namespace,
            db_path=str(self._db_path),
        )

    @property
    def namespace(self) -> str:
        """Get the key namespace."""
        return self._namespace

    @property
    def max_bytes(self) -> int:
        """Get the namespace size budget."""
        return self._max_bytes

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database connection and apply migrations.

        Creates the database file and parent directories if they don't exist.
        """
        if self._conn is not None:
            return

        if isinstance(self._db_path, Path):
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        if isinstance(self._db_path, Path):
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")

        migration_mgr = MigrationManager(self._conn)
        old_version = migration_mgr.get_current_version()
        applied = migration_mgr.apply_migrations()

        self._log.debug(
            "store_connected",
            old_version=old_version,
            new_version=CURRENT_VERSION,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.debug("store_closed")

    def __enter__(self) -> "KeyValueStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure database is connected.

        Returns:
            The database connection.

        Raises:
            StoreConnectionError: If not connected.
        """
        if self._conn is None:
            raise StoreConnectionError("Store not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Generator[sqlite3.Connection]:
        """Run a block in a transaction with timing.

        Args:
            operation: Name of the operation for logging.

        Yields:
            The database connection.
        """
        conn = self._ensure_connected()
        start_ns = time.perf_counter_ns()
        tx_id = str(uuid.uuid4())[:8]

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            self._log.debug("transaction_rolled_back", tx_id=tx_id, op=operation)
            raise

        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        self._metrics.record_tx_duration(duration_ms)
        self._log.debug(
            "transaction_complete",
            tx_id=tx_id,
            op=operation,
            duration_ms=round(duration_ms, 2),
        )

    def get(self, key: str) -> Any | None:
        """Read and decode a value.

        Args:
            key: Key to read.

        Returns:
            The decoded value, or None when the key is absent or its stored
            value is not valid JSON.
        """
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT value FROM kv_entries WHERE namespace = ? AND key = ?",
            (self._namespace, key),
        ).fetchone()

        if row is None:
            return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            self._log.warning("store_value_undecodable", key=key, error=str(e))
            return None

    def set(self, key: str, value: Any) -> StoreResult:
        """Encode and write a value.

        Args:
            key: Key to write.
            value: JSON-serializable value.

        Returns:
            Result describing whether the value was persisted.
        """
        try:
            encoded = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            return self._fail(key, StoreErrorClass.SERIALIZATION, str(e))

        size = len(encoded.encode("utf-8"))

        try:
            with self._transaction("set") as conn:
                self._check_quota(conn, key, size)
                conn.execute(
                    """
                    INSERT INTO kv_entries (namespace, key, value, size_bytes, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(namespace, key) DO UPDATE SET
                        value = excluded.value,
                        size_bytes = excluded.size_bytes,
                        updated_at = excluded.updated_at
                    """,
                    (
                        self._namespace,
                        key,
                        encoded,
                        size,
                        datetime.now(UTC).isoformat(),
                    ),
                )
        except QuotaExceededError as e:
            return self._fail(key, StoreErrorClass.QUOTA_EXCEEDED, str(e))
        except sqlite3.Error as e:
            return self._fail(key, StoreErrorClass.DATABASE, str(e))

        self._metrics.record_write(size)
        return StoreResult.success(key, bytes_written=size)

    def delete(self, key: str) -> StoreResult:
        """Delete a key if present.

        Args:
            key: Key to delete.

        Returns:
            Result of the delete; deleting a missing key succeeds.
        """
        try:
            with self._transaction("delete") as conn:
                cursor = conn.execute(
                    "DELETE FROM kv_entries WHERE namespace = ? AND key = ?",
                    (self._namespace, key),
                )
        except sqlite3.Error as e:
            return self._fail(key, StoreErrorClass.DATABASE, str(e))

        if cursor.rowcount:
            self._metrics.record_delete()
        return StoreResult.success(key)

    def keys(self) -> list[str]:
        """List keys in the namespace, alphabetically."""
        conn = self._ensure_connected()
        cursor = conn.execute(
            "SELECT key FROM kv_entries WHERE namespace = ? ORDER BY key",
            (self._namespace,),
        )
        return [row["key"] for row in cursor.fetchall()]

    def total_bytes(self) -> int:
        """Get the summed encoded size of all values in the namespace."""
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT COALESCE(SUM(size_bytes), 0) FROM kv_entries WHERE namespace = ?",
            (self._namespace,),
        ).fetchone()
        return int(row[0])

    def clear_all(self, keys: Iterable[str]) -> int:
        """Delete every given key, one at a time.

        Keys are independent, so no enclosing transaction is needed.

        Args:
            keys: Keys to remove.

        Returns:
            Number of deletes that succeeded.
        """
        cleared = sum(1 for key in keys if self.delete(key).ok)
        self._log.info("store_cleared", keys_cleared=cleared)
        return cleared

    def _check_quota(self, conn: sqlite3.Connection, key: str, size: int) -> None:
        """Reject a write that would push the namespace past its budget.

        Args:
            conn: Database connection.
            key: Key being written.
            size: Encoded size of the new value.

        Raises:
            QuotaExceededError: If the budget would be exceeded.
        """
        row = conn.execute(
            """
            SELECT
                COALESCE(SUM(size_bytes), 0) AS total,
                COALESCE(SUM(CASE WHEN key = ? THEN size_bytes ELSE 0 END), 0)
                    AS existing
            FROM kv_entries WHERE namespace = ?
            """,
            (key, self._namespace),
        ).fetchone()
        required = int(row["total"]) - int(row["existing"]) + size
        if required > self._max_bytes:
            raise QuotaExceededError(key, required, self._max_bytes)

    def _fail(
        self, key: str, error_class: StoreErrorClass, message: str
    ) -> StoreResult:
        """Log and build a failed result.

        Args:
            key: Key whose write failed.
            error_class: Failure classification.
            message: Failure description.

        Returns:
            The failed result.
        """
        self._metrics.record_write_failure(
            quota=error_class == StoreErrorClass.QUOTA_EXCEEDED
        )
        self._log.warning(
            "store_write_failed",
            key=key,
            error_class=error_class.value,
            error=message,
        )
        return StoreResult.failure(key, error_class, message)
