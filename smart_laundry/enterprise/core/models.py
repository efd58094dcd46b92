"""Domain models for the Smart Laundry tracker.

Machines are described statically by the catalog. Each machine may have one
persisted :class:`ReservationRecord`; its :class:`MachineStatus` is always
derived from that record and the current time and is never stored.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime
from typing import Dict, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from .errors import UnknownMachineError


class MachineKind(str, enum.Enum):
    """Appliance categories known to the catalog."""

    WASHER = "washer"
    DRYER = "dryer"


class MachineDescriptor(BaseModel):
    """Static, immutable description of one machine."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    kind: MachineKind
    default_duration_minutes: PositiveInt


class MachineCatalog:
    """Ordered, read-only set of machine descriptors keyed by id."""

    def __init__(self, descriptors: Mapping[str, MachineDescriptor]) -> None:
        self._descriptors: Dict[str, MachineDescriptor] = dict(descriptors)

    @classmethod
    def from_settings(cls, catalog: Mapping[str, object]) -> "MachineCatalog":
        """Build a catalog from ``AppSettings.catalog`` style entries."""

        descriptors = {
            machine_id: MachineDescriptor(
                id=machine_id,
                kind=entry.kind,  # type: ignore[attr-defined]
                default_duration_minutes=entry.default_duration_minutes,  # type: ignore[attr-defined]
            )
            for machine_id, entry in catalog.items()
        }
        return cls(descriptors)

    def get(self, machine_id: str) -> MachineDescriptor:
        try:
            return self._descriptors[machine_id]
        except KeyError:
            raise UnknownMachineError(machine_id) from None

    def ids(self) -> list[str]:
        return list(self._descriptors)

    def __contains__(self, machine_id: object) -> bool:
        return machine_id in self._descriptors

    def __iter__(self) -> Iterator[MachineDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


class ReservationRecord(BaseModel):
    """Persisted reservation state for a single machine.

    Serialised as ``{"inUse": bool, "endTime": "<ISO-8601 UTC>"}``. The free
    state written by the sweeper carries no end time.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    in_use: bool = Field(False, alias="inUse")
    end_time: Optional[datetime] = Field(None, alias="endTime")

    @classmethod
    def free(cls) -> "ReservationRecord":
        return cls(in_use=False)

    def is_active(self, now: datetime) -> bool:
        """``True`` while the reservation is in use and its end is strictly in the future."""

        return self.in_use and self.end_time is not None and self.end_time > now

    def is_stale(self, now: datetime) -> bool:
        """``True`` when the record still claims use but has logically expired."""

        return self.in_use and not self.is_active(now)


class MachineState(str, enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"


class MachineStatus(BaseModel):
    """Derived availability of a machine at one instant."""

    model_config = ConfigDict(frozen=True)

    state: MachineState
    minutes_remaining: Optional[PositiveInt] = None

    @classmethod
    def available(cls) -> "MachineStatus":
        return cls(state=MachineState.AVAILABLE)

    @classmethod
    def in_use(cls, minutes_remaining: int) -> "MachineStatus":
        return cls(state=MachineState.IN_USE, minutes_remaining=minutes_remaining)

    @classmethod
    def derive(cls, record: Optional[ReservationRecord], now: datetime) -> "MachineStatus":
        """Compute status from a stored record; an absent record means available."""

        if record is None or not record.is_active(now):
            return cls.available()
        assert record.end_time is not None
        return cls.in_use(minutes_until(record.end_time, now))

    @property
    def is_in_use(self) -> bool:
        return self.state == MachineState.IN_USE


def minutes_until(end_time: datetime, now: datetime) -> int:
    """Whole minutes left before ``end_time``, rounded up and never below one."""

    remaining = (end_time - now).total_seconds() / 60
    return max(1, math.ceil(remaining))


class MachineSnapshot(BaseModel):
    """Catalog entry plus its status, as rendered by the presentation layer."""

    machine: MachineDescriptor
    status: MachineStatus
    end_time: Optional[datetime] = None


class AlertPayload(BaseModel):
    """Completion-warning notification content."""

    machine_id: str
    title: str
    body: str
    fire_at: datetime

    @classmethod
    def ending_soon(cls, machine_id: str, lead_minutes: int, fire_at: datetime) -> "AlertPayload":
        return cls(
            machine_id=machine_id,
            title="Laundry Almost Done!",
            body=f"Your laundry in {machine_id} will be done in {lead_minutes} minutes",
            fire_at=fire_at,
        )
