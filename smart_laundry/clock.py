"""Clock abstractions so reservation logic never reads wall time directly."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """A source of the current UTC instant."""

    def now(self) -> datetime:  # pragma: no cover - interface
        ...


class SystemClock:
    """Clock backed by the system time, always timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = ensure_utc(start or datetime(2024, 1, 1, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._now

    def set(self, instant: datetime) -> None:
        self._now = ensure_utc(instant)

    def advance(self, *, minutes: float = 0, seconds: float = 0) -> datetime:
        self._now = self._now + timedelta(minutes=minutes, seconds=seconds)
        return self._now


def ensure_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware UTC datetime (naive values are taken as UTC)."""

    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
