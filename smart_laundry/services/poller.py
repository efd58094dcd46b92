"""Periodic staleness sweep and status refresh."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable, List, Optional

import structlog

from smart_laundry.enterprise.core import MachineSnapshot
from smart_laundry.services.reservations import ReservationEngine

logger = structlog.get_logger(__name__)

TickCallback = Callable[[List[MachineSnapshot]], None]


class StatusPoller:
    """Runs the sweep once at start and then every ``interval_s`` seconds.

    Each tick fires due alerts, rewrites stale records and hands a fresh
    snapshot to ``on_tick``. A failing tick is logged and the loop carries on.
    """

    def __init__(
        self,
        engine: ReservationEngine,
        interval_s: float = 60.0,
        on_tick: Optional[TickCallback] = None,
    ) -> None:
        self.engine = engine
        self.interval_s = interval_s
        self.on_tick = on_tick
        self.ticks = 0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> List[MachineSnapshot]:
        self.engine.notifications.fire_due()
        self.engine.expire_stale()
        snapshots = self.engine.snapshot()
        self.ticks += 1
        if self.on_tick is not None:
            self.on_tick(snapshots)
        return snapshots

    async def start(self) -> None:
        if self.running:
            return
        self.engine.notifications.attach(asyncio.get_running_loop())
        self._task = asyncio.create_task(self._run(), name="laundry-status-poller")
        logger.info("poller_started", interval_s=self.interval_s)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self.engine.notifications.detach()
        logger.info("poller_stopped", ticks=self.ticks)

    async def _run(self) -> None:
        while True:
            try:
                self.tick()
            except Exception:
                logger.exception("poll_tick_failed")
            await asyncio.sleep(self.interval_s)
