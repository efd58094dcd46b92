"""Scan-then-pick-duration flow that sits in front of :meth:`ReservationEngine.claim`.

Clamping lives here, not in the engine: the picker never offers a value
outside the configured bounds, while the engine rejects one outright.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from smart_laundry.enterprise.config.settings import DurationSettings
from smart_laundry.enterprise.core import MachineBusyError, ReservationRecord
from smart_laundry.services.reservations import ReservationEngine

logger = structlog.get_logger(__name__)


@dataclass
class DurationSelection:
    machine_id: str
    minutes: int
    bounds: DurationSettings

    def adjust(self, delta: int) -> int:
        self.minutes = self.bounds.clamp(self.minutes + delta)
        return self.minutes

    def increase(self) -> int:
        return self.adjust(self.bounds.step_minutes)

    def decrease(self) -> int:
        return self.adjust(-self.bounds.step_minutes)

    def set(self, minutes: int) -> int:
        self.minutes = self.bounds.clamp(minutes)
        return self.minutes


class ScanSession:
    """Holds at most one open duration selection for a scanned machine."""

    def __init__(self, engine: ReservationEngine) -> None:
        self.engine = engine
        self.current: Optional[DurationSelection] = None

    def scan(self, machine_id: str) -> DurationSelection:
        """Open a selection preset to the machine's default duration.

        Raises :class:`UnknownMachineError` for ids outside the catalog and
        :class:`MachineBusyError` when the machine is in use.
        """

        descriptor = self.engine.descriptor(machine_id)
        status = self.engine.get_status(machine_id)
        if status.is_in_use:
            logger.info("scan_rejected_busy", machine_id=machine_id, minutes_remaining=status.minutes_remaining)
            raise MachineBusyError(machine_id, status.minutes_remaining)

        bounds = self.engine.durations
        self.current = DurationSelection(
            machine_id=machine_id,
            minutes=bounds.clamp(descriptor.default_duration_minutes),
            bounds=bounds,
        )
        return self.current

    def confirm(self) -> Optional[ReservationRecord]:
        """Claim the selected machine; ``None`` when nothing is selected."""

        selection, self.current = self.current, None
        if selection is None:
            return None
        return self.engine.claim(selection.machine_id, selection.minutes)

    def cancel(self) -> None:
        self.current = None
