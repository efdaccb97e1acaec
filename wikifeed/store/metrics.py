"""Metrics collection for the persistent store."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class StoreMetrics:
    """Metrics for persistent store operations.

    Attributes:
        writes_total: Successful writes.
        write_failures_total: Writes that were not persisted.
        quota_rejections_total: Writes rejected by the size budget.
        deletes_total: Keys deleted.
        bytes_written_total: Encoded bytes persisted.
        tx_duration_ms: Cumulative transaction duration in milliseconds.
        tx_count: Number of transactions.
    """

    writes_total: int = 0
    write_failures_total: int = 0
    quota_rejections_total: int = 0
    deletes_total: int = 0
    bytes_written_total: int = 0
    tx_duration_ms: float = 0.0
    tx_count: int = 0

    _instance: ClassVar["StoreMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "StoreMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_write(self, size: int) -> None:
        """Record a persisted write.

        Args:
            size: Encoded value size in bytes.
        """
        self.writes_total += 1
        self.bytes_written_total += size

    def record_write_failure(self, quota: bool = False) -> None:
        """Record a write that was not persisted.

        Args:
            quota: Whether the size budget caused the failure.
        """
        self.write_failures_total += 1
        if quota:
            self.quota_rejections_total += 1

    def record_delete(self) -> None:
        """Record a deleted key."""
        self.deletes_total += 1

    def record_tx_duration(self, duration_ms: float) -> None:
        """Record transaction duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.tx_duration_ms += duration_ms
        self.tx_count += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "store_writes_total": self.writes_total,
            "store_write_failures_total": self.write_failures_total,
            "store_quota_rejections_total": self.quota_rejections_total,
            "store_deletes_total": self.deletes_total,
            "store_bytes_written_total": self.bytes_written_total,
            "store_tx_duration_ms": self.tx_duration_ms,
            "store_tx_count": self.tx_count,
        }
