"""Service layer exports for the Smart Laundry tracker."""

from .alerts import (
	AlertSink,
	CompositeAlertSink,
	LoggingAlertSink,
	MQTTAlertSink,
	RecordingAlertSink,
)
from .notifications import AlertHandle, NotificationScheduler
from .poller import StatusPoller
from .reservations import ReservationEngine
from .runtime import LaundryRuntime, build_runtime
from .session import DurationSelection, ScanSession

__all__ = [
	"AlertHandle",
	"AlertSink",
	"CompositeAlertSink",
	"DurationSelection",
	"LoggingAlertSink",
	"MQTTAlertSink",
	"NotificationScheduler",
	"RecordingAlertSink",
	"ReservationEngine",
	"ScanSession",
	"StatusPoller",
	"LaundryRuntime",
	"build_runtime",
]
