"""
Blog API — Settings Tests
===========================

What:  Environment parsing and validation of Settings.
"""

import pytest
from pydantic import ValidationError

from blog_api.config import Settings


def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/blogs")
    assert Settings().database_url == "postgresql+asyncpg://u:p@db:5432/blogs"


def test_port_is_optional(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert Settings().port is None


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "3000")
    assert Settings().port == 3000


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().log_level == "DEBUG"


def test_invalid_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")


def test_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    settings = Settings()
    assert settings.environment == "production"
    assert settings.is_production


def test_invalid_environment_rejected():
    with pytest.raises(ValidationError):
        Settings(environment="staging")
