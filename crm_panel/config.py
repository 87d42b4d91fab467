"""Runtime configuration for the CRM panel services."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_DEFAULT_TIMEOUT = 10
_STORAGE_BACKENDS = {"memory", "file", "postgres"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag (got '{raw}').")


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer (got '{raw}').") from exc
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}.")
    return value


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the Postgres storage backend."""

    host: str
    port: int
    user: str
    password: str
    dbname: str
    sslmode: Optional[str] = None
    connect_timeout: int = _DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Construct configuration from standard environment variables."""
        return cls(
            host=os.getenv("DB_HOST", os.getenv("POSTGRES_HOST", "localhost")),
            port=int(os.getenv("DB_PORT", os.getenv("POSTGRES_PORT", "5432"))),
            user=os.getenv("DB_USER", os.getenv("POSTGRES_USER", "crm_app")),
            password=os.getenv("DB_PASSWORD", os.getenv("POSTGRES_PASSWORD", "crm_password")),
            dbname=os.getenv("DB_NAME", os.getenv("POSTGRES_DB", "crm_panel")),
            sslmode=os.getenv("DB_SSLMODE"),
            connect_timeout=int(os.getenv("DB_CONNECT_TIMEOUT", str(_DEFAULT_TIMEOUT))),
        )


@dataclass(frozen=True)
class Settings:
    """Service-level settings shared by every repository."""

    storage_backend: str = "memory"
    storage_path: Path = Path("artifacts/local_storage")
    seed_sample_data: bool = True
    log_level: str = "INFO"
    report_history_limit: int = 50
    access_log_limit: int = 1000
    estimate_validity_days: int = 30
    invoice_payment_days: int = 30
    database: DatabaseConfig = field(default_factory=DatabaseConfig.from_env)

    def __post_init__(self) -> None:
        if self.storage_backend not in _STORAGE_BACKENDS:
            formatted = ", ".join(sorted(_STORAGE_BACKENDS))
            raise ValueError(f"CRM_STORAGE_BACKEND must be one of: {formatted}.")

    @classmethod
    def from_env(cls, *, load_env_file: bool = True) -> "Settings":
        """Build settings from the process environment, optionally reading `.env` first."""
        if load_env_file:
            load_dotenv()
        return cls(
            storage_backend=os.getenv("CRM_STORAGE_BACKEND", "memory").strip().lower(),
            storage_path=Path(os.getenv("CRM_STORAGE_PATH", "artifacts/local_storage")),
            seed_sample_data=_env_bool("CRM_SEED_SAMPLE_DATA", True),
            log_level=os.getenv("CRM_LOG_LEVEL", "INFO").strip().upper(),
            report_history_limit=_env_int("CRM_REPORT_HISTORY_LIMIT", 50),
            access_log_limit=_env_int("CRM_ACCESS_LOG_LIMIT", 1000),
            estimate_validity_days=_env_int("CRM_ESTIMATE_VALIDITY_DAYS", 30),
            invoice_payment_days=_env_int("CRM_INVOICE_PAYMENT_DAYS", 30),
            database=DatabaseConfig.from_env(),
        )
