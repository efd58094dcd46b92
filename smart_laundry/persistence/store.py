"""State store contract and the on-disk record format."""

from __future__ import annotations

import json
from typing import Optional, Protocol

from pydantic import ValidationError

from smart_laundry.clock import ensure_utc
from smart_laundry.enterprise.core import ReservationRecord, StorageFailureError


class StateStore(Protocol):
    """Durable key-value store of reservation records keyed by machine id."""

    def get(self, machine_id: str) -> Optional[ReservationRecord]: ...

    def set(self, machine_id: str, record: ReservationRecord) -> None: ...


def encode_record(record: ReservationRecord) -> str:
    """Serialise to ``{"inUse": bool, "endTime": ISO-8601 UTC}``."""

    payload: dict = {"inUse": record.in_use}
    if record.end_time is not None:
        payload["endTime"] = ensure_utc(record.end_time).isoformat().replace("+00:00", "Z")
    return json.dumps(payload)


def decode_record(machine_id: str, raw: str) -> ReservationRecord:
    try:
        record = ReservationRecord.model_validate_json(raw)
    except ValidationError as exc:
        raise StorageFailureError(f"corrupt record for {machine_id}", machine_id) from exc
    if record.end_time is not None:
        record = record.model_copy(update={"end_time": ensure_utc(record.end_time)})
    return record
