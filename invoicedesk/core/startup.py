"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging

from invoicedesk.core.config import Config, get_config
from invoicedesk.core.exceptions import ConfigurationError
from invoicedesk.core.logging_config import configure_logging
from invoicedesk.database.db import get_active_database_url, init_db, verify_database_connection

logger = logging.getLogger(__name__)


def validate_startup_config(config: Config) -> None:
    """Fail-fast config and connectivity checks."""
    database_ok = verify_database_connection()
    active_database_url = get_active_database_url()
    if not database_ok and config.DB_CONNECTIVITY_REQUIRED:
        raise ConfigurationError("Database connectivity check failed.")
    if not database_ok:
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )

    if config.is_production and active_database_url.startswith("sqlite"):
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "database_url_scheme": active_database_url.split("://", 1)[0],
            "db_connectivity_required": config.DB_CONNECTIVITY_REQUIRED,
            "api_prefix": config.API_PREFIX,
            "jwt_ttl_seconds": config.JWT_TTL_SECONDS,
        },
    )


def bootstrap(config: Config | None = None) -> None:
    """Initialize logging, validate runtime configuration and create tables."""
    config = config or get_config()
    configure_logging(config)
    validate_startup_config(config)
    init_db()
    logger.info("startup.schema.ready", extra={"event": "startup.schema.ready"})
