"""Database models for Task-It."""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time used for row timestamps"""
    return datetime.now(timezone.utc)
