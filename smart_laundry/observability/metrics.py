"""Prometheus metrics utilities."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge

metrics_registry = CollectorRegistry()

REQUEST_COUNTER = Counter(
    "smart_laundry_api_requests_total",
    "Total number of API requests handled",
    registry=metrics_registry,
)

CLAIM_COUNTER = Counter(
    "smart_laundry_claims_total",
    "Claim attempts by outcome",
    labelnames=("outcome",),
    registry=metrics_registry,
)

RELEASE_COUNTER = Counter(
    "smart_laundry_releases_total",
    "Reservations ended before their natural expiry",
    registry=metrics_registry,
)

STALE_EXPIRED_COUNTER = Counter(
    "smart_laundry_stale_records_expired_total",
    "Stale reservation records rewritten to the free state",
    registry=metrics_registry,
)

ALERT_COUNTER = Counter(
    "smart_laundry_alerts_total",
    "Completion-warning alerts by outcome",
    labelnames=("outcome",),
    registry=metrics_registry,
)

MACHINES_IN_USE_GAUGE = Gauge(
    "smart_laundry_machines_in_use",
    "Machines with an active reservation at the last sweep",
    registry=metrics_registry,
)


def record_claim(outcome: str) -> None:
    CLAIM_COUNTER.labels(outcome=outcome).inc()


def record_alert(outcome: str) -> None:
    ALERT_COUNTER.labels(outcome=outcome).inc()
