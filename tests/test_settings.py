"""Tests for the configuration loader."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from smart_laundry.enterprise.config.settings import AppSettings, DurationSettings, MachineSettings, get_settings
from smart_laundry.enterprise.core import MachineKind


def test_settings_load_default_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Default environment should combine base settings and dev overrides."""

    config_dir = tmp_path / "config"
    env_dir = config_dir / "environments"
    env_dir.mkdir(parents=True)

    (config_dir / "settings.yaml").write_text(
        """
        environment: dev
        catalog:
          washer1:
            kind: washer
            default_duration_minutes: 40
        timing:
          poll_interval_s: 30
        """,
        encoding="utf-8",
    )

    (env_dir / "dev.yaml").write_text(
        """
        timing:
          alert_lead_minutes: 15
        logging:
          level: DEBUG
        """,
        encoding="utf-8",
    )

    monkeypatch.setenv("SL_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("SL_ENVIRONMENT", raising=False)

    get_settings.cache_clear()
    settings = get_settings()

    assert settings.environment == "dev"
    assert list(settings.catalog) == ["washer1"]
    assert settings.catalog["washer1"].kind == MachineKind.WASHER
    assert settings.catalog["washer1"].default_duration_minutes == 40
    assert settings.timing.poll_interval_s == 30
    assert settings.timing.alert_lead_minutes == 15
    assert settings.logging.level == "DEBUG"
    get_settings.cache_clear()


def test_settings_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Environment variables should override YAML configuration."""

    config_dir = tmp_path / "config"
    env_dir = config_dir / "environments"
    env_dir.mkdir(parents=True)

    (config_dir / "settings.yaml").write_text(
        """
        environment: prod
        storage:
          backend: sql
          url: sqlite:///base.db
        """,
        encoding="utf-8",
    )
    (env_dir / "prod.yaml").write_text("{}", encoding="utf-8")

    monkeypatch.setenv("SL_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("SL_ENVIRONMENT", "prod")
    monkeypatch.setenv("SL_STORAGE__BACKEND", "memory")

    get_settings.cache_clear()
    settings = get_settings()

    assert settings.environment == "prod"
    assert settings.storage.backend == "memory"
    assert settings.storage.url == "sqlite:///base.db"
    get_settings.cache_clear()


def test_reference_catalog_is_the_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SL_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("SL_ENVIRONMENT", raising=False)

    settings = AppSettings()

    assert {k: (v.kind.value, v.default_duration_minutes) for k, v in settings.catalog.items()} == {
        "washer1": ("washer", 30),
        "washer2": ("washer", 30),
        "dryer1": ("dryer", 60),
        "dryer2": ("dryer", 60),
    }
    assert settings.durations == DurationSettings(min_minutes=5, max_minutes=90, step_minutes=5)
    assert settings.timing.alert_lead_minutes == 10


def test_default_duration_must_fit_bounds(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SL_CONFIG_DIR", str(tmp_path))

    with pytest.raises(ValidationError):
        AppSettings(catalog={"dryer1": MachineSettings(kind=MachineKind.DRYER, default_duration_minutes=120)})
    with pytest.raises(ValidationError):
        AppSettings(catalog={})


def test_inverted_duration_bounds_are_rejected() -> None:
    with pytest.raises(ValidationError):
        DurationSettings(min_minutes=60, max_minutes=30)
