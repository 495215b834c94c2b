"""Configuration module for the InvoiceDesk application."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from invoicedesk.core.exceptions import ConfigurationError

load_dotenv()

PLACEHOLDER_SECRET = "change_me_jwt_secret"


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    JWT_SECRET: str
    JWT_TTL_SECONDS: int
    API_PREFIX: str
    DEFAULT_CURRENCY: str
    INVOICE_NUMBER_MAX_RETRIES: int
    PASSWORD_HASH_ITERATIONS: int
    COMPANY_NAME: str
    COMPANY_ADDRESS: str
    COMPANY_EMAIL: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    def __repr__(self) -> str:
        # JWT_SECRET must never end up in logs or tracebacks.
        return f"Config(APP_NAME={self.APP_NAME!r}, ENV={self.ENV!r}, API_PREFIX={self.API_PREFIX!r})"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=False)

    config = Config(
        APP_NAME="InvoiceDesk",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./invoicedesk.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        JWT_SECRET=os.getenv("JWT_SECRET", PLACEHOLDER_SECRET),
        JWT_TTL_SECONDS=int(os.getenv("JWT_TTL_SECONDS", "3600")),
        API_PREFIX=os.getenv("API_PREFIX", "/api").rstrip("/"),
        DEFAULT_CURRENCY=os.getenv("DEFAULT_CURRENCY", "USD").strip().upper(),
        INVOICE_NUMBER_MAX_RETRIES=int(os.getenv("INVOICE_NUMBER_MAX_RETRIES", "5")),
        PASSWORD_HASH_ITERATIONS=int(os.getenv("PASSWORD_HASH_ITERATIONS", "310000")),
        COMPANY_NAME=os.getenv("COMPANY_NAME", "InvoiceDesk"),
        COMPANY_ADDRESS=os.getenv("COMPANY_ADDRESS", ""),
        COMPANY_EMAIL=os.getenv("COMPANY_EMAIL", "billing@example.com"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if not config.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET must be set.")
    if config.JWT_TTL_SECONDS < 1:
        raise ConfigurationError("JWT_TTL_SECONDS must be >= 1.")
    if not config.API_PREFIX.startswith("/"):
        raise ConfigurationError("API_PREFIX must start with '/'.")
    if not re.fullmatch(r"[A-Z]{3}", config.DEFAULT_CURRENCY):
        raise ConfigurationError("DEFAULT_CURRENCY must be a 3-letter code.")
    if config.INVOICE_NUMBER_MAX_RETRIES < 1:
        raise ConfigurationError("INVOICE_NUMBER_MAX_RETRIES must be >= 1.")
    if config.PASSWORD_HASH_ITERATIONS < 1000:
        raise ConfigurationError("PASSWORD_HASH_ITERATIONS must be >= 1000.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and config.JWT_SECRET == PLACEHOLDER_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses the placeholder value.")
    if config.is_production and len(config.JWT_SECRET) < 32:
        raise ConfigurationError("Production JWT_SECRET must be at least 32 characters.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
