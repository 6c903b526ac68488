import pytest

from app.config import AppConfig


def test_defaults(monkeypatch):
    for name in ("GMC_DATABASE_PATH", "GMC_MAX_VIEW_ROWS", "GMC_DEBUG", "GMC_PORT"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig()

    assert config.database_path == "gmc_logs/gmc_readings.sqlite"
    assert config.max_view_rows == 100
    assert config.DEBUG is False
    assert config.port == 8000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GMC_DEBUG", "yes")
    monkeypatch.setenv("GMC_MAX_VIEW_ROWS", "25")
    monkeypatch.setenv("GMC_ALLOWLIST_PATH", "/etc/gmc/whitelist.txt")

    config = AppConfig()

    assert config.DEBUG is True
    assert config.max_view_rows == 25
    assert config.as_flask_config()["ALLOWLIST_PATH"] == "/etc/gmc/whitelist.txt"


@pytest.mark.parametrize("name,value", [("GMC_MAX_VIEW_ROWS", "0"), ("GMC_PORT", "eighty"), ("GMC_DB_BUSY_TIMEOUT_MS", "-1")])
def test_invalid_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        AppConfig()
