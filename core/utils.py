from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Timezone-aware current UTC time. Default clock for the engine."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (e.g. read back from SQLite)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(start: Optional[datetime], end: datetime) -> float:
    """Non-negative number of days from start to end; 0.0 when start is unknown."""
    if start is None:
        return 0.0
    delta = as_utc(end) - as_utc(start)
    return max(0.0, delta.total_seconds() / 86400.0)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
