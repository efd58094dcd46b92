"""Machine status and reservation endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from smart_laundry.server.api.schemas.machines import (
    ClaimRequest,
    DurationSelectionSchema,
    MachineSchema,
    ReservationSchema,
    SweepSchema,
)
from smart_laundry.server.dependencies import get_engine, get_scan_session
from smart_laundry.services import ReservationEngine, ScanSession

router = APIRouter(prefix="/machines", tags=["machines"])


@router.get("", response_model=List[MachineSchema])
async def list_machines(engine: ReservationEngine = Depends(get_engine)) -> List[MachineSchema]:
    return [MachineSchema.from_domain(snapshot) for snapshot in engine.snapshot()]


@router.post("/sweep", response_model=SweepSchema)
async def sweep(engine: ReservationEngine = Depends(get_engine)) -> SweepSchema:
    return SweepSchema(expired=engine.expire_stale())


@router.get("/{machine_id}", response_model=MachineSchema)
async def get_machine(machine_id: str, engine: ReservationEngine = Depends(get_engine)) -> MachineSchema:
    return MachineSchema.from_domain(engine.machine_snapshot(machine_id))


@router.post("/{machine_id}/scan", response_model=DurationSelectionSchema)
async def scan_machine(machine_id: str, session: ScanSession = Depends(get_scan_session)) -> DurationSelectionSchema:
    return DurationSelectionSchema.from_domain(session.scan(machine_id))


@router.post("/{machine_id}/claim", response_model=ReservationSchema, status_code=status.HTTP_201_CREATED)
async def claim_machine(
    machine_id: str,
    request: ClaimRequest,
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationSchema:
    record = engine.claim(machine_id, request.duration_minutes)
    return ReservationSchema.from_domain(machine_id, record)


@router.post("/{machine_id}/release", status_code=status.HTTP_204_NO_CONTENT)
async def release_machine(machine_id: str, engine: ReservationEngine = Depends(get_engine)) -> None:
    engine.release(machine_id)
