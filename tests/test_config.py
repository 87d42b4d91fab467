"""Environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from crm_panel.config import DatabaseConfig, Settings


def test_defaults_when_environment_is_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CRM_STORAGE_BACKEND",
        "CRM_STORAGE_PATH",
        "CRM_SEED_SAMPLE_DATA",
        "CRM_LOG_LEVEL",
        "CRM_REPORT_HISTORY_LIMIT",
        "CRM_ACCESS_LOG_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env(load_env_file=False)

    assert settings.storage_backend == "memory"
    assert settings.storage_path == Path("artifacts/local_storage")
    assert settings.seed_sample_data is True
    assert settings.log_level == "INFO"
    assert settings.report_history_limit == 50
    assert settings.access_log_limit == 1000


def test_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CRM_STORAGE_BACKEND", " File ")
    monkeypatch.setenv("CRM_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("CRM_SEED_SAMPLE_DATA", "no")
    monkeypatch.setenv("CRM_LOG_LEVEL", "debug")
    monkeypatch.setenv("CRM_REPORT_HISTORY_LIMIT", "5")
    monkeypatch.setenv("CRM_INVOICE_PAYMENT_DAYS", "14")

    settings = Settings.from_env(load_env_file=False)

    assert settings.storage_backend == "file"
    assert settings.storage_path == tmp_path
    assert settings.seed_sample_data is False
    assert settings.log_level == "DEBUG"
    assert settings.report_history_limit == 5
    assert settings.invoice_payment_days == 14


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("CRM_SEED_SAMPLE_DATA", "maybe", "CRM_SEED_SAMPLE_DATA must be a boolean"),
        ("CRM_ACCESS_LOG_LIMIT", "lots", "CRM_ACCESS_LOG_LIMIT must be an integer"),
        ("CRM_REPORT_HISTORY_LIMIT", "0", "CRM_REPORT_HISTORY_LIMIT must be at least 1"),
        ("CRM_STORAGE_BACKEND", "redis", "CRM_STORAGE_BACKEND must be one of"),
    ],
)
def test_invalid_values_name_the_variable(monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        Settings.from_env(load_env_file=False)


def test_database_config_prefers_db_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("POSTGRES_HOST", "ignored")
    monkeypatch.setenv("DB_PORT", "6543")

    config = DatabaseConfig.from_env()

    assert config.host == "db.internal"
    assert config.port == 6543
