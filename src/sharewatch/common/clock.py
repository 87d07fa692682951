"""Wall-clock helpers.

All persisted timestamps are naive UTC so they compare cleanly across
SQLite and PostgreSQL.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
