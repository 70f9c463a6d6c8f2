"""Shared pytest fixtures for the dashboard backend tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from cache import PageCache
from config import Settings
from main import create_app
from models import SEED_TABLES


@pytest.fixture
def settings():
  """Settings for an in-memory database with seeding enabled."""
  return Settings(
    database_url="sqlite://",
    seed_enabled=True,
    bcrypt_rounds=4,
    seed_concurrency=3,
  )


@pytest.fixture
def engine():
  """Create an in-memory SQLite engine shared across threads."""
  engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
  )
  yield engine
  engine.dispose()


@pytest.fixture
def schema(engine):
  """Create the four dashboard tables."""
  SQLModel.metadata.create_all(engine, tables=SEED_TABLES)
  return engine


@pytest.fixture
def session(schema):
  with Session(schema) as session:
    yield session


@pytest.fixture
def page_cache():
  return PageCache()


@pytest.fixture
def app(settings, engine):
  return create_app(settings=settings, engine=engine)


@pytest.fixture
def client(app):
  """Create a FastAPI test client that does not follow redirects."""
  with TestClient(app, follow_redirects=False) as client:
    yield client
