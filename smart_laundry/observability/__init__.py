"""Observability utilities for structured logging, metrics, and tracing."""

from .logging import configure_logging, machine_context
from .metrics import metrics_registry, record_alert, record_claim
from .tracing import configure_tracer, get_tracer

__all__ = [
    "configure_logging",
    "configure_tracer",
    "get_tracer",
    "machine_context",
    "metrics_registry",
    "record_alert",
    "record_claim",
]
