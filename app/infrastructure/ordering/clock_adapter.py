"""
Adapter: System clock.

Implements the Clock port with the wall-clock time in UTC.
"""

from datetime import datetime, timezone

from app.domain.ordering.ports import Clock


class SystemClockAdapter(Clock):
    """Returns the current timezone-aware UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
