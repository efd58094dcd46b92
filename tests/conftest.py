from datetime import datetime, timezone

import pytest

from smart_laundry.clock import ManualClock
from smart_laundry.enterprise.config.settings import AppSettings, DurationSettings
from smart_laundry.enterprise.core import MachineCatalog
from smart_laundry.persistence import InMemoryStateStore
from smart_laundry.services import NotificationScheduler, RecordingAlertSink, ReservationEngine

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def alerts() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest.fixture
def engine(clock: ManualClock, store: InMemoryStateStore, alerts: RecordingAlertSink) -> ReservationEngine:
    settings = AppSettings()
    return ReservationEngine(
        catalog=MachineCatalog.from_settings(settings.catalog),
        store=store,
        clock=clock,
        notifications=NotificationScheduler(clock, lead_minutes=10),
        alert_sink=alerts,
        durations=DurationSettings(),
    )


@pytest.fixture
def t0() -> datetime:
    return T0
