# tests/test_config.py
from pathlib import Path

import pytest

from starchain.config import Settings, default_db_path, get_settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.db_path == default_db_path()
    assert settings.validation_window == 300
    assert settings.sweep_interval == 60.0
    assert settings.message_suffix == "starRegistry"


def test_env_overrides(tmp_path: Path):
    settings = Settings.from_env({
        "STARCHAIN_DB_PATH": str(tmp_path / "x.db"),
        "STARCHAIN_VALIDATION_WINDOW": "120",
        "STARCHAIN_SWEEP_INTERVAL": "5",
        "STARCHAIN_MESSAGE_SUFFIX": "otherRegistry",
    })
    assert settings.db_path == (tmp_path / "x.db").resolve()
    assert settings.validation_window == 120
    assert settings.sweep_interval == 5.0
    assert settings.message_suffix == "otherRegistry"


@pytest.mark.parametrize("env", [
    {"STARCHAIN_VALIDATION_WINDOW": "soon"},
    {"STARCHAIN_VALIDATION_WINDOW": "0"},
    {"STARCHAIN_SWEEP_INTERVAL": "-1"},
])
def test_invalid_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_get_settings_reads_process_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("STARCHAIN_DB_PATH", str(tmp_path / "proc.db"))
    assert get_settings().db_path == (tmp_path / "proc.db").resolve()
