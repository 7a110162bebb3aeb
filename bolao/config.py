"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) DB_PATH (path to a sqlite file)
      3) Fallback to ./data/megasena.db
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    db_path = os.getenv("DB_PATH")
    if db_path:
        return f"sqlite:///{db_path}"

    return "sqlite:///./data/megasena.db"


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    DATABASE_URL: str = resolve_database_url()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Sao_Paulo")

    # Upstream results API
    LOTTERY_API_URL: str = os.getenv(
        "LOTTERY_API_URL",
        "https://servicebus2.caixa.gov.br/portaldeloterias/api/megasena/",
    )
    LOTTERY_API_TIMEOUT: float = _env_float("LOTTERY_API_TIMEOUT", 10.0)

    # Draw poller
    POLLER_ENABLED: bool = _env_bool("POLLER_ENABLED", True)
    POLL_INTERVAL_SECONDS: float = _env_float("POLL_INTERVAL_SECONDS", 300.0)

    SHARE_BASE_URL: str = os.getenv("SHARE_BASE_URL", "https://bolao.bru.to")

    # Outgoing mail
    SMTP_HOST: str = os.getenv("SMTP_HOST", "127.0.0.1")
    SMTP_PORT: int = _env_int("SMTP_PORT", 25)
    SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    SMTP_STARTTLS: bool = _env_bool("SMTP_STARTTLS", False)
    SMTP_SSL: bool = _env_bool("SMTP_SSL", False)
    SMTP_TIMEOUT: float = _env_float("SMTP_TIMEOUT", 30.0)
    FROM_DOMAIN: str = os.getenv("FROM_DOMAIN", "bru.to")


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    return DevelopmentConfig
