"""Clock capability used for timestamps and duration measurement."""

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current wall-clock time (timezone-aware UTC)."""
        ...

    def monotonic_ms(self) -> float:
        """Monotonic milliseconds, only meaningful as a difference."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic_ms(self) -> float:
        return time.monotonic() * 1000


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def iso_utc(moment: datetime) -> str:
    """ISO-8601 timestamp with a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
