from pathlib import Path

import pytest

from smart_laundry.enterprise.config.settings import get_settings
from smart_laundry.main import main
from smart_laundry.services import LoggingAlertSink


@pytest.fixture(autouse=True)
def cli_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "settings.yaml").write_text(
        f"storage:\n  backend: sql\n  url: sqlite:///{tmp_path / 'cli.db'}\nlogging:\n  level: WARNING\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SL_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("SL_ENVIRONMENT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_claim_persists_between_invocations(capsys) -> None:
    assert main(["claim", "washer1", "--minutes", "200"]) == 0
    out = capsys.readouterr().out
    assert "Duration adjusted to 90 minutes." in out
    assert "washer1 reserved for 90 minutes" in out

    assert main(["status"]) == 0
    out = capsys.readouterr().out
    assert "washer1" in out and "In Use (90 mins remaining)" in out
    assert "dryer1" in out and "Available" in out


def test_claiming_busy_machine_fails(capsys) -> None:
    assert main(["claim", "dryer1"]) == 0
    assert main(["claim", "dryer1"]) == 1
    assert "currently in use" in capsys.readouterr().err


def test_release_and_sweep_commands(capsys) -> None:
    main(["claim", "washer2", "--minutes", "15"])
    capsys.readouterr()

    assert main(["release", "washer2"]) == 0
    assert "washer2 released." in capsys.readouterr().out

    assert main(["sweep"]) == 0
    assert "Expired: none" in capsys.readouterr().out


def test_short_claim_delivers_alert_immediately(monkeypatch, capsys) -> None:
    delivered = []
    monkeypatch.setattr(LoggingAlertSink, "deliver", lambda self, payload: delivered.append(payload))

    assert main(["claim", "dryer1", "--minutes", "5"]) == 0

    assert [p.machine_id for p in delivered] == ["dryer1"]
    assert delivered[0].body == "Your laundry in dryer1 will be done in 10 minutes"
