"""Error taxonomy for reservation operations."""

from __future__ import annotations

from typing import Optional


class ReservationError(Exception):
    """Base class for failures surfaced by the reservation engine."""

    def __init__(self, message: str, machine_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.machine_id = machine_id


class UnknownMachineError(ReservationError):
    """The identifier is not part of the catalog."""

    def __init__(self, machine_id: str) -> None:
        super().__init__(f"unknown machine: {machine_id!r}", machine_id)


class MachineBusyError(ReservationError):
    """The machine holds a reservation that has not ended yet."""

    def __init__(self, machine_id: str, minutes_remaining: Optional[int] = None) -> None:
        message = f"{machine_id} is currently in use"
        if minutes_remaining is not None:
            message += f" ({minutes_remaining} min remaining)"
        super().__init__(message, machine_id)
        self.minutes_remaining = minutes_remaining


class InvalidDurationError(ReservationError):
    def __init__(self, machine_id: str, duration_minutes: object, min_minutes: int, max_minutes: int) -> None:
        super().__init__(
            f"duration {duration_minutes!r} for {machine_id} must be between {min_minutes} and {max_minutes} minutes",
            machine_id,
        )
        self.duration_minutes = duration_minutes
        self.min_minutes = min_minutes
        self.max_minutes = max_minutes


class StorageFailureError(ReservationError):
    """The state store could not read or write a record."""
