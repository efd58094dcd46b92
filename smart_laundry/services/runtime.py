"""Wiring of the engine and its collaborators from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import structlog
from sqlalchemy import Engine

from smart_laundry.clock import Clock, SystemClock
from smart_laundry.enterprise.config.settings import AppSettings, StorageBackend, get_settings
from smart_laundry.enterprise.core import MachineCatalog
from smart_laundry.persistence import InMemoryStateStore, SqlStateStore, StateStore, dispose_engine, init_engine
from smart_laundry.services.alerts import AlertSink, CompositeAlertSink, LoggingAlertSink, MQTTAlertSink, RecordingAlertSink
from smart_laundry.services.notifications import NotificationScheduler
from smart_laundry.services.poller import StatusPoller
from smart_laundry.services.reservations import ReservationEngine

logger = structlog.get_logger(__name__)


@dataclass
class LaundryRuntime:
    """Everything one client session needs, constructed once and passed around."""

    settings: AppSettings
    engine: ReservationEngine
    poller: StatusPoller
    recent_alerts: RecordingAlertSink
    db_engine: Optional[Engine] = None
    mqtt_sink: Optional[MQTTAlertSink] = None

    def close(self) -> None:
        if self.mqtt_sink is not None:
            self.mqtt_sink.disconnect()
        dispose_engine(self.db_engine)


def build_runtime(
    settings: Optional[AppSettings] = None,
    *,
    clock: Optional[Clock] = None,
    store: Optional[StateStore] = None,
) -> LaundryRuntime:
    """Build a runtime from settings; ``clock`` and ``store`` override the defaults."""

    config = settings or get_settings()
    clock = clock or SystemClock()

    db_engine: Optional[Engine] = None
    if store is None:
        if config.storage.backend == StorageBackend.SQL:
            db_engine = init_engine(config.storage)
            store = SqlStateStore(db_engine)
        else:
            store = InMemoryStateStore()

    recent = RecordingAlertSink()
    sinks: List[AlertSink] = [LoggingAlertSink(), recent]
    mqtt_sink: Optional[MQTTAlertSink] = None
    if config.mqtt.enabled:
        mqtt_sink = MQTTAlertSink(config.mqtt)
        try:
            mqtt_sink.connect()
        except OSError as exc:
            logger.warning("mqtt_unavailable", broker=config.mqtt.broker_host, error=str(exc))
        sinks.append(mqtt_sink)

    engine = ReservationEngine(
        catalog=MachineCatalog.from_settings(config.catalog),
        store=store,
        clock=clock,
        notifications=NotificationScheduler(clock, lead_minutes=config.timing.alert_lead_minutes),
        alert_sink=CompositeAlertSink(sinks),
        durations=config.durations,
    )
    poller = StatusPoller(engine, interval_s=config.timing.poll_interval_s)
    return LaundryRuntime(
        settings=config,
        engine=engine,
        poller=poller,
        recent_alerts=recent,
        db_engine=db_engine,
        mqtt_sink=mqtt_sink,
    )
