"""Pydantic schemas for machine API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from smart_laundry.enterprise.config.settings import DurationSettings
from smart_laundry.enterprise.core import AlertPayload, MachineSnapshot, ReservationRecord
from smart_laundry.services.session import DurationSelection


class MachineSchema(BaseModel):
    id: str
    kind: str
    default_duration_minutes: int
    status: str
    minutes_remaining: Optional[int]
    end_time: Optional[datetime]

    @classmethod
    def from_domain(cls, snapshot: MachineSnapshot) -> "MachineSchema":
        return cls(
            id=snapshot.machine.id,
            kind=snapshot.machine.kind.value,
            default_duration_minutes=snapshot.machine.default_duration_minutes,
            status=snapshot.status.state.value,
            minutes_remaining=snapshot.status.minutes_remaining,
            end_time=snapshot.end_time,
        )


class ClaimRequest(BaseModel):
    duration_minutes: int = Field(..., description="Length of the reservation in minutes.")


class ReservationSchema(BaseModel):
    machine_id: str
    in_use: bool
    end_time: Optional[datetime]

    @classmethod
    def from_domain(cls, machine_id: str, record: ReservationRecord) -> "ReservationSchema":
        return cls(machine_id=machine_id, in_use=record.in_use, end_time=record.end_time)


class DurationSelectionSchema(BaseModel):
    machine_id: str
    minutes: int
    min_minutes: int
    max_minutes: int
    step_minutes: int

    @classmethod
    def from_domain(cls, selection: DurationSelection) -> "DurationSelectionSchema":
        bounds: DurationSettings = selection.bounds
        return cls(
            machine_id=selection.machine_id,
            minutes=selection.minutes,
            min_minutes=bounds.min_minutes,
            max_minutes=bounds.max_minutes,
            step_minutes=bounds.step_minutes,
        )


class SweepSchema(BaseModel):
    expired: List[str]


class AlertSchema(BaseModel):
    machine_id: str
    title: str
    body: str
    fire_at: datetime

    @classmethod
    def from_domain(cls, payload: AlertPayload) -> "AlertSchema":
        return cls(machine_id=payload.machine_id, title=payload.title, body=payload.body, fire_at=payload.fire_at)
