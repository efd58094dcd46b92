"""Reservation engine for shared laundry machines."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

import structlog

from smart_laundry.clock import Clock
from smart_laundry.enterprise.config.settings import DurationSettings
from smart_laundry.enterprise.core import (
	AlertPayload,
	InvalidDurationError,
	MachineBusyError,
	MachineCatalog,
	MachineDescriptor,
	MachineSnapshot,
	MachineStatus,
	ReservationRecord,
	StorageFailureError,
	UnknownMachineError,
)
from smart_laundry.observability.logging import machine_context
from smart_laundry.observability.metrics import (
	MACHINES_IN_USE_GAUGE,
	RELEASE_COUNTER,
	STALE_EXPIRED_COUNTER,
	record_claim,
)
from smart_laundry.observability.tracing import get_tracer
from smart_laundry.persistence.store import StateStore
from smart_laundry.services.alerts import AlertSink, LoggingAlertSink
from smart_laundry.services.notifications import NotificationScheduler

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


class ReservationEngine:
	"""Owns the Available/InUse state machine for every catalog machine.

	Status is always derived from the stored record and the clock; a record
	whose end time has passed reads as available even before
	:meth:`expire_stale` rewrites it. Every method runs to completion without
	yielding, so the busy check and the write in :meth:`claim` cannot be
	interleaved with another operation on the same engine.
	"""

	def __init__(
		self,
		catalog: MachineCatalog,
		store: StateStore,
		clock: Clock,
		notifications: Optional[NotificationScheduler] = None,
		alert_sink: Optional[AlertSink] = None,
		durations: Optional[DurationSettings] = None,
	) -> None:
		self.catalog = catalog
		self.store = store
		self.clock = clock
		self.notifications = notifications or NotificationScheduler(clock)
		self.alert_sink = alert_sink or LoggingAlertSink()
		self.durations = durations or DurationSettings()

	def descriptor(self, machine_id: str) -> MachineDescriptor:
		try:
			return self.catalog.get(machine_id)
		except UnknownMachineError:
			logger.warning("unknown_machine", machine_id=machine_id)
			raise

	def machines(self) -> List[MachineDescriptor]:
		return list(self.catalog)

	def get_status(self, machine_id: str) -> MachineStatus:
		self.descriptor(machine_id)
		return MachineStatus.derive(self.store.get(machine_id), self.clock.now())

	def claim(self, machine_id: str, duration_minutes: int) -> ReservationRecord:
		"""Reserve ``machine_id`` for ``duration_minutes`` starting now.

		Raises :class:`UnknownMachineError`, :class:`InvalidDurationError`,
		:class:`MachineBusyError` or :class:`StorageFailureError`. On any
		failure the stored record and pending alert are left untouched.
		"""

		with machine_context(machine_id), tracer.start_as_current_span("reservation.claim") as span:
			span.set_attribute("laundry.machine_id", machine_id)
			span.set_attribute("laundry.duration_minutes", str(duration_minutes))
			try:
				self.descriptor(machine_id)
			except UnknownMachineError:
				record_claim("unknown")
				raise
			if not self._valid_duration(duration_minutes):
				record_claim("invalid")
				logger.info("claim_rejected_duration", duration_minutes=duration_minutes)
				raise InvalidDurationError(
					machine_id,
					duration_minutes,
					self.durations.min_minutes,
					self.durations.max_minutes,
				)

			try:
				now = self.clock.now()
				status = MachineStatus.derive(self.store.get(machine_id), now)
				if status.is_in_use:
					record_claim("busy")
					logger.info("claim_rejected_busy", minutes_remaining=status.minutes_remaining)
					raise MachineBusyError(machine_id, status.minutes_remaining)

				record = ReservationRecord(in_use=True, end_time=now + timedelta(minutes=duration_minutes))
				self.store.set(machine_id, record)
			except StorageFailureError:
				record_claim("storage_error")
				raise

			self.notifications.schedule_ending_soon(machine_id, duration_minutes, self._deliver_alert)
			record_claim("claimed")
			logger.info(
				"machine_claimed",
				duration_minutes=duration_minutes,
				end_time=record.end_time.isoformat() if record.end_time else None,
			)
			return record

	def release(self, machine_id: str) -> bool:
		"""Free ``machine_id`` before its natural expiry.

		Always allowed. Returns ``True`` when an active reservation was ended.
		Any pending alert for the machine is cancelled.
		"""

		with machine_context(machine_id):
			self.descriptor(machine_id)
			try:
				record = self.store.get(machine_id)
			except StorageFailureError:
				# unreadable records are overwritten so the machine can always be freed
				logger.warning("release_overwrites_unreadable_record")
				record = ReservationRecord(in_use=True)
			active = record is not None and record.is_active(self.clock.now())
			if record is not None and record.in_use:
				self.store.set(machine_id, ReservationRecord.free())
			self.notifications.cancel(machine_id)
			if active:
				RELEASE_COUNTER.inc()
				logger.info("machine_released")
			return active

	def expire_stale(self) -> List[str]:
		"""Rewrite every stale record to the free state.

		Returns the ids that were rewritten. Running it again without
		intervening claims writes nothing.
		"""

		with tracer.start_as_current_span("reservation.expire_stale"):
			now = self.clock.now()
			expired: List[str] = []
			in_use = 0
			for machine_id in self.catalog.ids():
				try:
					record = self.store.get(machine_id)
				except StorageFailureError as exc:
					logger.error("sweep_skipped_machine", machine_id=machine_id, error=str(exc))
					continue
				if record is None:
					continue
				if record.is_stale(now):
					try:
						self.store.set(machine_id, ReservationRecord.free())
					except StorageFailureError as exc:
						logger.error("sweep_skipped_machine", machine_id=machine_id, error=str(exc))
						continue
					self.notifications.cancel(machine_id)
					expired.append(machine_id)
				elif record.is_active(now):
					in_use += 1

			MACHINES_IN_USE_GAUGE.set(in_use)
			if expired:
				STALE_EXPIRED_COUNTER.inc(len(expired))
				logger.info("stale_reservations_expired", machine_ids=expired)
			return expired

	def snapshot(self) -> List[MachineSnapshot]:
		"""Snapshot every readable machine; unreadable records are logged and left out."""

		now = self.clock.now()
		snapshots: List[MachineSnapshot] = []
		for descriptor in self.catalog:
			try:
				snapshots.append(self._snapshot(descriptor, now))
			except StorageFailureError as exc:
				logger.error("snapshot_skipped_machine", machine_id=descriptor.id, error=str(exc))
		return snapshots

	def machine_snapshot(self, machine_id: str) -> MachineSnapshot:
		return self._snapshot(self.descriptor(machine_id), self.clock.now())

	def _snapshot(self, descriptor: MachineDescriptor, now: datetime) -> MachineSnapshot:
		record = self.store.get(descriptor.id)
		status = MachineStatus.derive(record, now)
		end_time = record.end_time if record is not None and status.is_in_use else None
		return MachineSnapshot(machine=descriptor, status=status, end_time=end_time)

	def _valid_duration(self, duration_minutes: object) -> bool:
		if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
			return False
		return self.durations.contains(duration_minutes)

	def _deliver_alert(self, payload: AlertPayload) -> None:
		self.alert_sink.deliver(payload)
