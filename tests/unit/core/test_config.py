from __future__ import annotations

import pytest

from invoicedesk.core.config import PLACEHOLDER_SECRET, _build_config, get_config
from invoicedesk.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_defaults_are_valid(monkeypatch):
    for key in ("JWT_TTL_SECONDS", "API_PREFIX", "DEFAULT_CURRENCY", "INVOICE_NUMBER_MAX_RETRIES"):
        monkeypatch.delenv(key, raising=False)
    config = _build_config("development")
    assert config.JWT_TTL_SECONDS == 3600
    assert config.API_PREFIX == "/api"
    assert config.DEFAULT_CURRENCY == "USD"
    assert config.INVOICE_NUMBER_MAX_RETRIES == 5


def test_repr_hides_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "do-not-print-me")
    assert "do-not-print-me" not in repr(_build_config("development"))


def test_production_rejects_placeholder_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", PLACEHOLDER_SECRET)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./prod.db")
    with pytest.raises(ConfigurationError):
        _build_config("production")


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("DATABASE_URL", "mysql://db/invoices"),
        ("JWT_TTL_SECONDS", "0"),
        ("DEFAULT_CURRENCY", "dollars"),
        ("INVOICE_NUMBER_MAX_RETRIES", "0"),
        ("LOG_LEVEL", "CHATTY"),
    ],
)
def test_invalid_settings_raise(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError):
        _build_config("development")
