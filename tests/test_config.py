"""Tests for settings and engine construction."""

import pytest

from config import Settings, load_settings
from db import create_db_engine
from errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
  for name in ("POSTGRES_URL", "DATABASE_URL", "DB_SSLMODE", "SEED_ENABLED", "SEED_TOKEN",
               "BCRYPT_ROUNDS", "SEED_CONCURRENCY", "CORS_ORIGINS", "LOG_LEVEL"):
    monkeypatch.delenv(name, raising=False)
  # keep a developer's .env out of the way
  monkeypatch.setattr("config.load_dotenv", lambda *a, **k: False)
  return monkeypatch


def test_missing_database_url(clean_env):
  with pytest.raises(ConfigurationError, match="POSTGRES_URL"):
    load_settings()


def test_defaults(clean_env):
  clean_env.setenv("POSTGRES_URL", "postgresql://u:p@db/app")

  settings = load_settings()

  assert settings.database_url == "postgresql://u:p@db/app"
  assert settings.db_sslmode == "require"
  assert settings.seed_enabled is False
  assert settings.seed_token is None
  assert settings.bcrypt_rounds == 10
  assert settings.cors_origins == ["http://127.0.0.1:5173", "http://localhost:5173"]


def test_database_url_fallback_and_overrides(clean_env):
  clean_env.setenv("DATABASE_URL", "sqlite:///dash.db")
  clean_env.setenv("SEED_ENABLED", "yes")
  clean_env.setenv("SEED_TOKEN", "abc")
  clean_env.setenv("BCRYPT_ROUNDS", "12")
  clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

  settings = load_settings()

  assert settings.database_url == "sqlite:///dash.db"
  assert settings.seed_enabled is True
  assert settings.seed_token == "abc"
  assert settings.bcrypt_rounds == 12
  assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_bad_integer_setting(clean_env):
  clean_env.setenv("POSTGRES_URL", "sqlite://")
  clean_env.setenv("SEED_CONCURRENCY", "many")

  with pytest.raises(ConfigurationError, match="SEED_CONCURRENCY"):
    load_settings()


def test_postgres_engine_requires_ssl(monkeypatch):
  captured = {}
  monkeypatch.setattr("db.create_engine", lambda url, **kw: captured.update(url=url, **kw))

  create_db_engine(Settings(database_url="postgresql://u:p@localhost/app"))

  assert captured["connect_args"] == {"sslmode": "require"}
  assert captured["pool_pre_ping"] is True


def test_sqlite_engine():
  engine = create_db_engine(Settings(database_url="sqlite://"))
  try:
    assert engine.dialect.name == "sqlite"
  finally:
    engine.dispose()


def test_unsupported_database_fails_at_engine_build(monkeypatch):
  monkeypatch.setattr("db.create_engine", lambda *a, **kw: pytest.fail("engine should not be built"))

  with pytest.raises(ConfigurationError, match="mysql"):
    create_db_engine(Settings(database_url="mysql://u:p@localhost/app"))


def test_unsupported_database_fails_at_startup():
  from fastapi.testclient import TestClient
  from main import create_app

  app = create_app(settings=Settings(database_url="mysql://u:p@localhost/app"))
  with pytest.raises(ConfigurationError):
    with TestClient(app):
      pass
