"""Clock type and epoch-millisecond conversions.

Persisted timestamps (preference scores, cache refresh times) are stored as
epoch milliseconds; everything in memory works with aware UTC datetimes.
"""

from collections.abc import Callable
from datetime import UTC, datetime


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds.

    Args:
        moment: Datetime to convert. Naive values are assumed to be UTC.

    Returns:
        Milliseconds since the Unix epoch.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def from_epoch_ms(value: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)
