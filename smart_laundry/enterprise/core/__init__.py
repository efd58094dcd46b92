"""Core domain package for the Smart Laundry tracker."""

from .errors import (
    InvalidDurationError,
    MachineBusyError,
    ReservationError,
    StorageFailureError,
    UnknownMachineError,
)
from .models import (
    AlertPayload,
    MachineCatalog,
    MachineDescriptor,
    MachineKind,
    MachineSnapshot,
    MachineState,
    MachineStatus,
    ReservationRecord,
    minutes_until,
)

__all__ = [
    "AlertPayload",
    "MachineCatalog",
    "MachineDescriptor",
    "MachineKind",
    "MachineSnapshot",
    "MachineState",
    "MachineStatus",
    "ReservationRecord",
    "minutes_until",
    "ReservationError",
    "UnknownMachineError",
    "MachineBusyError",
    "InvalidDurationError",
    "StorageFailureError",
]
