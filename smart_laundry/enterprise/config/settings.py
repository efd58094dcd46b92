"""Unified configuration system for the Smart Laundry tracker.

This module centralises application settings using :mod:`pydantic-settings`.
Configuration values are assembled from (in order of precedence):

1. Explicit keyword arguments when instantiating :class:`AppSettings`.
2. Environment variables prefixed with ``SL_`` (supports nested fields using ``__``).
3. A ``.env`` file located at the project root.
4. YAML configuration files: ``config/settings.yaml`` (base) and
   ``config/environments/<environment>.yaml`` (environment-specific overrides).

All sources are deeply merged, so an environment file only needs to name the
keys it changes. The machine catalog lives here as well; it is static for the
lifetime of the process.
"""

from __future__ import annotations

import enum
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smart_laundry.enterprise.core.models import MachineKind

__all__ = [
	"MachineSettings",
	"DurationSettings",
	"TimingSettings",
	"StorageBackend",
	"StorageSettings",
	"MQTTSettings",
	"TelemetrySettings",
	"LoggingSettings",
	"AppSettings",
	"get_settings",
]


_ENVIRONMENT_VAR = "SL_ENVIRONMENT"
_CONFIG_DIR_ENV_VAR = "SL_CONFIG_DIR"


def _project_root() -> Path:
	"""Return the absolute project root directory."""

	return Path(__file__).resolve().parents[3]


DEFAULT_CONFIG_DIR = _project_root() / "config"


class MachineSettings(BaseModel):
	"""Static description of one machine in the catalog."""

	kind: MachineKind
	default_duration_minutes: PositiveInt = Field(..., description="Preset shown when the machine is scanned.")


def _reference_catalog() -> Dict[str, MachineSettings]:
	return {
		"washer1": MachineSettings(kind=MachineKind.WASHER, default_duration_minutes=30),
		"washer2": MachineSettings(kind=MachineKind.WASHER, default_duration_minutes=30),
		"dryer1": MachineSettings(kind=MachineKind.DRYER, default_duration_minutes=60),
		"dryer2": MachineSettings(kind=MachineKind.DRYER, default_duration_minutes=60),
	}


class DurationSettings(BaseModel):
	"""Bounds for reservation lengths, in minutes."""

	min_minutes: PositiveInt = Field(5, description="Shortest claim accepted by the engine.")
	max_minutes: PositiveInt = Field(90, description="Longest claim accepted by the engine.")
	step_minutes: PositiveInt = Field(5, description="Increment used by the duration picker.")

	@model_validator(mode="after")
	def _check_bounds(self) -> "DurationSettings":
		if self.min_minutes > self.max_minutes:
			raise ValueError("min_minutes must not exceed max_minutes")
		return self

	def contains(self, minutes: int) -> bool:
		return self.min_minutes <= minutes <= self.max_minutes

	def clamp(self, minutes: int) -> int:
		return min(max(minutes, self.min_minutes), self.max_minutes)


class TimingSettings(BaseModel):
	"""Polling cadence and alert lead time."""

	poll_interval_s: PositiveFloat = Field(60.0, description="Seconds between staleness sweeps.")
	alert_lead_minutes: PositiveInt = Field(10, description="Minutes before the end at which the alert fires.")


class StorageBackend(str, enum.Enum):
	MEMORY = "memory"
	SQL = "sql"


class StorageSettings(BaseModel):
	"""Where reservation records are kept."""

	backend: StorageBackend = Field(StorageBackend.SQL, description="Record store implementation.")
	url: str = Field("sqlite:///laundry_state.db", description="SQLAlchemy database URL.")
	echo: bool = Field(False, description="Enable SQL echo for debugging.")


class MQTTSettings(BaseModel):
	"""Optional MQTT channel used to publish completion alerts."""

	enabled: bool = Field(False, description="Publish alerts to the broker.")
	broker_host: str = Field("localhost", description="MQTT broker hostname or IP address.")
	port: PositiveInt = Field(1883, description="MQTT broker port.")
	topic_alerts: str = Field("smart_laundry/alerts", description="Topic alerts are published on.")
	username: Optional[str] = Field(None, description="Username for authenticated MQTT sessions.")
	password: Optional[str] = Field(None, description="Password for authenticated MQTT sessions.")
	use_tls: bool = Field(False, description="Enable TLS for MQTT connections.")
	ca_path: Optional[str] = Field(None, description="Path to CA certificate for TLS validation.")
	client_cert_path: Optional[str] = Field(None, description="Path to client certificate for mutual TLS.")
	client_key_path: Optional[str] = Field(None, description="Path to client private key for mutual TLS.")


class TelemetrySettings(BaseModel):
	"""Tracing and metrics configuration."""

	otlp_endpoint: Optional[str] = Field(None, description="OTLP collector endpoint for traces.")
	metrics_enabled: bool = Field(True, description="Enable Prometheus metrics collection.")


class LoggingSettings(BaseModel):
	"""Logging verbosity and related tuning parameters."""

	level: str = Field("INFO", description="Root log level (DEBUG, INFO, etc.).")
	json: bool = Field(False, description="Emit logs as JSON for aggregators.")


def _load_yaml_file(path: Path) -> Dict[str, Any]:
	"""Safely load a YAML file into a dictionary.

	Parameters
	----------
	path:
		Path to the YAML file.

	Returns
	-------
	dict
		Parsed YAML content or an empty dict if the file does not exist.
	"""

	if not path.exists() or path.is_dir():
		return {}

	with path.open("r", encoding="utf-8") as handle:
		data = yaml.safe_load(handle)
		return data or {}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
	"""Recursively merge ``override`` into ``base``."""

	result = base.copy()
	for key, value in override.items():
		if (
			key in result
			and isinstance(result[key], dict)
			and isinstance(value, dict)
		):
			result[key] = _deep_merge(result[key], value)
		else:
			result[key] = value
	return result


class AppSettings(BaseSettings):
	"""Primary configuration model for the application."""

	environment: str = Field("dev", description="Active environment name (dev, test, prod, ...).")
	catalog: Dict[str, MachineSettings] = Field(default_factory=_reference_catalog)
	durations: DurationSettings = DurationSettings()
	timing: TimingSettings = TimingSettings()
	storage: StorageSettings = StorageSettings()
	mqtt: MQTTSettings = MQTTSettings()
	telemetry: TelemetrySettings = TelemetrySettings()
	logging: LoggingSettings = LoggingSettings()

	model_config = SettingsConfigDict(
		env_prefix="SL_",
		env_file=".env",
		env_file_encoding="utf-8",
		env_nested_delimiter="__",
		extra="ignore",
		validate_assignment=True,
	)

	@model_validator(mode="after")
	def _check_catalog(self) -> "AppSettings":
		if not self.catalog:
			raise ValueError("catalog must define at least one machine")
		for machine_id, machine in self.catalog.items():
			if not machine_id.strip():
				raise ValueError("machine identifiers must be non-empty")
			if not self.durations.contains(machine.default_duration_minutes):
				raise ValueError(
					f"default duration for {machine_id} is outside "
					f"[{self.durations.min_minutes}, {self.durations.max_minutes}]"
				)
		return self

	@classmethod
	def _yaml_settings_source(cls) -> Dict[str, Any]:
		"""Produce settings from YAML configuration files."""

		config_dir = Path(os.getenv(_CONFIG_DIR_ENV_VAR, DEFAULT_CONFIG_DIR))
		base = _load_yaml_file(config_dir / "settings.yaml")
		env_name = os.getenv(_ENVIRONMENT_VAR, base.get("environment", "dev"))
		env_override = _load_yaml_file(config_dir / "environments" / f"{env_name}.yaml")

		merged = _deep_merge(base, env_override)
		merged.setdefault("environment", env_name)
		return merged

	@classmethod
	def settings_customise_sources(
		cls,
		_settings_cls,
		init_settings,
		env_settings,
		dotenv_settings,
		file_secret_settings,
	):
		"""Inject YAML files as the lowest-precedence settings source."""

		return (
			init_settings,
			env_settings,
			dotenv_settings,
			cls._yaml_settings_source,
			file_secret_settings,
		)


@lru_cache()
def get_settings(**overrides: Any) -> AppSettings:
	"""Return a cached :class:`AppSettings` instance.

	Keyword arguments are forwarded to :class:`AppSettings` and therefore have
	the highest precedence.
	"""

	return AppSettings(**overrides)
