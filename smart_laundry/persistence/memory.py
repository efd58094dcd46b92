"""In-memory store used for tests and when persistent storage is disabled."""

from __future__ import annotations

from typing import Dict, Optional

from smart_laundry.enterprise.core import ReservationRecord

from .store import decode_record, encode_record


class InMemoryStateStore:
    """Keeps serialised records in process memory.

    Records go through the same JSON encoding as the SQL store so both
    backends observe identical round-trip behaviour.
    """

    def __init__(self) -> None:
        self.entries: Dict[str, str] = {}
        self.writes = 0

    def get(self, machine_id: str) -> Optional[ReservationRecord]:
        raw = self.entries.get(machine_id)
        if raw is None:
            return None
        return decode_record(machine_id, raw)

    def set(self, machine_id: str, record: ReservationRecord) -> None:
        self.entries[machine_id] = encode_record(record)
        self.writes += 1
