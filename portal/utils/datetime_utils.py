"""
Timezone-aware datetime utilities.

SQLite stores naive timestamps, so everything is persisted as naive UTC and
made timezone-aware again when compared.
"""

from datetime import datetime, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.
    """
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive values are assumed to already be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to the naive UTC form stored in the database."""
    if dt is None:
        return None
    return ensure_utc(dt).replace(tzinfo=None)


def storage_now() -> datetime:
    """Current time in storage form (naive UTC)."""
    return now_utc().replace(tzinfo=None)
