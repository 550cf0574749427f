import pytest
from pydantic import ValidationError

from contestjudge.config import Settings


def test_language_factor_overrides_from_env(monkeypatch):
    monkeypatch.setenv("LANGUAGE_FACTOR_OVERRIDES", '{"71": 0.9, "74": 0.8}')
    assert Settings().LANGUAGE_FACTOR_OVERRIDES == {71: 0.9, 74: 0.8}


def test_cors_origins_accept_comma_list(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    assert Settings().CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_score_rounding_is_validated(monkeypatch):
    monkeypatch.setenv("SCORE_ROUNDING", "HALF_EVEN")
    assert Settings().SCORE_ROUNDING == "half_even"

    monkeypatch.setenv("SCORE_ROUNDING", "ceil")
    with pytest.raises(ValidationError):
        Settings()


def test_database_url_defaults_to_sqlite(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("POSTGRES_HOST", raising=False)
    assert Settings().get_database_url().startswith("sqlite:///")

    monkeypatch.setenv("POSTGRES_HOST", "db")
    monkeypatch.setenv("POSTGRES_PASSWORD", "p@ss")
    assert Settings().get_database_url() == "postgresql://contestjudge:p%40ss@db:5432/contestjudge_db"


def test_production_requires_strong_admin_token():
    settings = Settings(ENVIRONMENT="production", JUDGE0_BASE_URL="http://judge")
    with pytest.raises(ValueError):
        settings.validate_runtime_settings()

    Settings(
        ENVIRONMENT="production",
        JUDGE0_BASE_URL="http://judge",
        ADMIN_TOKEN="x" * 40,
    ).validate_runtime_settings()
