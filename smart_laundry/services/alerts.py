"""Alert sinks: where completion warnings are delivered once they fire."""

from __future__ import annotations

import json
import ssl
from collections import deque
from typing import Deque, Iterable, List, Protocol

import paho.mqtt.client as mqtt
import structlog

from smart_laundry.enterprise.config.settings import MQTTSettings
from smart_laundry.enterprise.core import AlertPayload

logger = structlog.get_logger(__name__)


class AlertSink(Protocol):
    def deliver(self, payload: AlertPayload) -> None: ...


class LoggingAlertSink:
    """Writes each alert to the structured log."""

    def deliver(self, payload: AlertPayload) -> None:
        logger.info("laundry_alert", machine_id=payload.machine_id, title=payload.title, body=payload.body)


class RecordingAlertSink:
    """Keeps the most recent alerts so the API can show them."""

    def __init__(self, maxlen: int = 50) -> None:
        self._alerts: Deque[AlertPayload] = deque(maxlen=maxlen)

    def deliver(self, payload: AlertPayload) -> None:
        self._alerts.append(payload)

    def recent(self) -> List[AlertPayload]:
        return list(reversed(self._alerts))

    def clear(self) -> None:
        self._alerts.clear()


class CompositeAlertSink:
    """Fans an alert out to several sinks; one failing sink does not stop the rest."""

    def __init__(self, sinks: Iterable[AlertSink]) -> None:
        self.sinks = list(sinks)

    def deliver(self, payload: AlertPayload) -> None:
        for sink in self.sinks:
            try:
                sink.deliver(payload)
            except Exception:
                logger.exception("alert_sink_failed", sink=type(sink).__name__, machine_id=payload.machine_id)


class MQTTAlertSink:
    """Publishes alerts as JSON on the configured MQTT topic."""

    def __init__(self, settings: MQTTSettings, client_id: str = "smart-laundry") -> None:
        self.settings = settings
        self.client = mqtt.Client(client_id=client_id, callback_api_version=mqtt.CallbackAPIVersion.VERSION2)
        self.client.on_connect = self._on_connect

        if settings.username:
            self.client.username_pw_set(settings.username, settings.password)

        if settings.use_tls:
            context = ssl.create_default_context()
            if settings.ca_path:
                context.load_verify_locations(settings.ca_path)
            if settings.client_cert_path and settings.client_key_path:
                context.load_cert_chain(certfile=settings.client_cert_path, keyfile=settings.client_key_path)
            self.client.tls_set_context(context)

    def connect(self) -> None:
        """Connect to the broker and start the network loop."""

        self.client.connect(self.settings.broker_host, self.settings.port, 60)
        self.client.loop_start()

    def _on_connect(self, _client: mqtt.Client, _userdata, _flags, reason_code, _properties=None) -> None:
        if reason_code.is_failure:
            logger.warning("mqtt_connect_failed", broker=self.settings.broker_host, reason=str(reason_code))
        else:
            logger.info("mqtt_connected", broker=self.settings.broker_host)

    def deliver(self, payload: AlertPayload) -> None:
        message = json.dumps(
            {"machineId": payload.machine_id, "title": payload.title, "body": payload.body}
        )
        self.client.publish(self.settings.topic_alerts, message, qos=1)

    def disconnect(self) -> None:
        self.client.loop_stop()
        self.client.disconnect()
