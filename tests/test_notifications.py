import asyncio
from datetime import timedelta

import pytest

from smart_laundry.services import NotificationScheduler


def _collector():
    fired = []
    return fired, fired.append


def test_alert_fires_lead_minutes_before_end(clock, t0):
    scheduler = NotificationScheduler(clock, lead_minutes=10)
    fired, callback = _collector()

    handle = scheduler.schedule_ending_soon("washer1", 30, callback)
    assert handle.fire_at == t0 + timedelta(minutes=20)

    clock.advance(minutes=19, seconds=59)
    assert scheduler.fire_due() == []

    clock.advance(seconds=1)
    assert [p.machine_id for p in scheduler.fire_due()] == ["washer1"]
    assert scheduler.fire_due() == []
    assert len(fired) == 1
    assert fired[0].title == "Laundry Almost Done!"
    assert fired[0].body == "Your laundry in washer1 will be done in 10 minutes"


def test_short_reservation_alert_is_clamped_to_now(clock, t0):
    scheduler = NotificationScheduler(clock, lead_minutes=10)
    fired, callback = _collector()

    handle = scheduler.schedule_ending_soon("dryer1", 5, callback)

    assert handle.fire_at == t0
    scheduler.fire_due()
    assert [p.machine_id for p in fired] == ["dryer1"]


def test_rescheduling_cancels_previous_alert(clock):
    scheduler = NotificationScheduler(clock)
    fired, callback = _collector()

    first = scheduler.schedule_ending_soon("washer2", 30, callback)
    second = scheduler.schedule_ending_soon("washer2", 60, callback)

    assert first.cancelled
    assert scheduler.pending("washer2") is second
    clock.advance(minutes=25)
    assert scheduler.fire_due() == []
    assert fired == []


def test_cancel_is_reported_once(clock):
    scheduler = NotificationScheduler(clock)
    _, callback = _collector()
    handle = scheduler.schedule_ending_soon("washer1", 30, callback)

    assert scheduler.cancel("washer1") is True
    assert scheduler.cancel("washer1") is False
    assert not handle.pending
    assert handle.cancel() is False


def test_failing_delivery_is_dropped(clock):
    scheduler = NotificationScheduler(clock)

    def explode(_payload):
        raise RuntimeError("push service unavailable")

    handle = scheduler.schedule_ending_soon("dryer2", 10, explode)

    assert len(scheduler.fire_due()) == 1
    assert handle.fired
    assert scheduler.pending("dryer2") is None


def test_due_alerts_fire_in_time_order(clock):
    scheduler = NotificationScheduler(clock)
    fired, callback = _collector()
    scheduler.schedule_ending_soon("dryer1", 60, callback)
    scheduler.schedule_ending_soon("washer1", 30, callback)

    clock.advance(minutes=60)
    scheduler.fire_due()

    assert [p.machine_id for p in fired] == ["washer1", "dryer1"]


def test_engine_routes_alert_to_sink(engine, alerts, clock):
    engine.claim("washer1", 30)
    clock.advance(minutes=20)

    engine.notifications.fire_due()

    assert [a.machine_id for a in alerts.recent()] == ["washer1"]


def test_expired_session_drops_unfired_alert(engine, alerts, clock):
    engine.claim("washer1", 30)
    clock.advance(minutes=40)

    engine.expire_stale()

    assert engine.notifications.fire_due() == []
    assert alerts.recent() == []


@pytest.mark.asyncio
async def test_attached_loop_fires_due_alert(clock):
    scheduler = NotificationScheduler(clock)
    fired, callback = _collector()
    scheduler.attach(asyncio.get_running_loop())

    scheduler.schedule_ending_soon("dryer1", 5, callback)
    await asyncio.sleep(0.01)

    assert [p.machine_id for p in fired] == ["dryer1"]
    assert scheduler.fire_due() == []
    scheduler.detach()


@pytest.mark.asyncio
async def test_cancel_disarms_loop_timer(clock):
    scheduler = NotificationScheduler(clock)
    _, callback = _collector()
    scheduler.attach(asyncio.get_running_loop())

    handle = scheduler.schedule_ending_soon("washer1", 30, callback)
    timer = handle._timer
    assert timer is not None

    scheduler.cancel("washer1")

    assert timer.cancelled()
    scheduler.detach()
