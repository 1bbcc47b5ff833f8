"""System Clock — wall-clock implementation of core.boundary_protocols.Clock."""

from datetime import datetime, timezone


class SystemClock:
    """Returns the current UTC time (timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
