"""SQL-backed state store."""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from smart_laundry.enterprise.core import ReservationRecord, StorageFailureError

from .database import make_sessionmaker
from .models import MachineStateRecord
from .store import decode_record, encode_record

logger = structlog.get_logger(__name__)


class SqlStateStore:
    """Durable store keeping one row per machine.

    Each ``set`` runs in its own transaction; on failure the transaction is
    rolled back and the previous row is left as it was.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = make_sessionmaker(engine)

    def get(self, machine_id: str) -> Optional[ReservationRecord]:
        try:
            with self._sessions() as session:
                row = session.get(MachineStateRecord, machine_id)
                raw = row.payload if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("state_read_failed", machine_id=machine_id, error=str(exc))
            raise StorageFailureError(f"could not read state for {machine_id}", machine_id) from exc
        if raw is None:
            return None
        return decode_record(machine_id, raw)

    def set(self, machine_id: str, record: ReservationRecord) -> None:
        payload = encode_record(record)
        try:
            with self._sessions.begin() as session:
                row = session.get(MachineStateRecord, machine_id)
                if row is None:
                    session.add(MachineStateRecord(machine_id=machine_id, payload=payload))
                else:
                    row.payload = payload
        except SQLAlchemyError as exc:
            logger.error("state_write_failed", machine_id=machine_id, error=str(exc))
            raise StorageFailureError(f"could not write state for {machine_id}", machine_id) from exc
