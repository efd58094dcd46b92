"""Completion-warning alert scheduling.

Alerts are one-shot and live only in memory. Each machine has at most one
pending alert; scheduling a new one, or cancelling, supersedes the old handle.
Due alerts fire either from :meth:`NotificationScheduler.fire_due` (called by
the poller) or, when the scheduler is attached to a running event loop, from a
``loop.call_later`` timer. A handle fires at most once.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import structlog

from smart_laundry.clock import Clock
from smart_laundry.enterprise.core import AlertPayload
from smart_laundry.observability.metrics import record_alert

logger = structlog.get_logger(__name__)

FireCallback = Callable[[AlertPayload], None]

DEFAULT_LEAD_MINUTES = 10


class AlertHandle:
    """Cancellable reference to one scheduled alert."""

    def __init__(self, payload: AlertPayload, callback: FireCallback) -> None:
        self.payload = payload
        self.callback = callback
        self.cancelled = False
        self.fired = False
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def machine_id(self) -> str:
        return self.payload.machine_id

    @property
    def fire_at(self) -> datetime:
        return self.payload.fire_at

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def is_due(self, now: datetime) -> bool:
        return self.pending and self.fire_at <= now

    def cancel(self) -> bool:
        """Cancel the alert; returns ``False`` if it already fired or was cancelled."""

        if not self.pending:
            return False
        self.cancelled = True
        self._disarm()
        return True

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class NotificationScheduler:
    """Arranges a single alert ``lead_minutes`` before each reservation ends."""

    def __init__(self, clock: Clock, lead_minutes: int = DEFAULT_LEAD_MINUTES) -> None:
        self.clock = clock
        self.lead_minutes = lead_minutes
        self._pending: Dict[str, AlertHandle] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def schedule_ending_soon(
        self,
        machine_id: str,
        duration_minutes: int,
        fire_callback: FireCallback,
    ) -> AlertHandle:
        """Schedule the alert for a reservation that starts now.

        The delay is ``duration_minutes - lead_minutes``; a non-positive delay
        is clamped to zero so short reservations are alerted immediately.
        """

        self.cancel(machine_id)
        delay_minutes = max(0, duration_minutes - self.lead_minutes)
        fire_at = self.clock.now() + timedelta(minutes=delay_minutes)
        handle = AlertHandle(AlertPayload.ending_soon(machine_id, self.lead_minutes, fire_at), fire_callback)
        self._pending[machine_id] = handle
        if self._loop is not None:
            self._arm(handle)
        logger.debug("alert_scheduled", machine_id=machine_id, fire_at=fire_at.isoformat(), delay_minutes=delay_minutes)
        return handle

    def pending(self, machine_id: str) -> Optional[AlertHandle]:
        handle = self._pending.get(machine_id)
        if handle is not None and handle.pending:
            return handle
        return None

    def cancel(self, machine_id: str) -> bool:
        handle = self._pending.pop(machine_id, None)
        if handle is None or not handle.cancel():
            return False
        record_alert("cancelled")
        logger.info("alert_cancelled", machine_id=machine_id)
        return True

    def fire_due(self) -> List[AlertPayload]:
        """Fire every pending alert whose time has come, in fire-time order."""

        now = self.clock.now()
        due = sorted(
            (handle for handle in self._pending.values() if handle.is_due(now)),
            key=lambda handle: handle.fire_at,
        )
        return [handle.payload for handle in due if self._fire(handle)]

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Drive pending and future alerts from ``loop`` timers."""

        self._loop = loop
        for handle in self._pending.values():
            if handle.pending:
                self._arm(handle)

    def detach(self) -> None:
        for handle in self._pending.values():
            handle._disarm()
        self._loop = None

    def _arm(self, handle: AlertHandle) -> None:
        assert self._loop is not None
        handle._disarm()
        delay = max(0.0, (handle.fire_at - self.clock.now()).total_seconds())
        handle._timer = self._loop.call_later(delay, self._fire, handle)

    def _fire(self, handle: AlertHandle) -> bool:
        if not handle.pending:
            return False
        handle.fired = True
        handle._disarm()
        if self._pending.get(handle.machine_id) is handle:
            del self._pending[handle.machine_id]
        try:
            handle.callback(handle.payload)
        except Exception:
            # delivery is best-effort; the alert is not retried
            record_alert("failed")
            logger.exception("alert_delivery_failed", machine_id=handle.machine_id)
        else:
            record_alert("fired")
            logger.info("alert_fired", machine_id=handle.machine_id)
        return True
