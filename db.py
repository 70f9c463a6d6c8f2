# db.py
from typing import Any, Dict, Iterator

from fastapi import Depends, Request
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, create_engine

from cache import PageCache
from config import Settings
from errors import ConfigurationError

# dialects with an ON CONFLICT DO NOTHING insert (see seed.insert_ignore)
SUPPORTED_BACKENDS = ("postgresql", "sqlite")


def create_db_engine(settings: Settings) -> Engine:
  url = make_url(settings.database_url)
  if url.get_backend_name() not in SUPPORTED_BACKENDS:
    raise ConfigurationError(
      f"Unsupported database {url.get_backend_name()!r}, expected one of {', '.join(SUPPORTED_BACKENDS)}"
    )
  connect_args: Dict[str, Any] = {}
  if url.get_backend_name() == "postgresql" and settings.db_sslmode:
    connect_args["sslmode"] = settings.db_sslmode
  elif url.get_backend_name() == "sqlite":
    connect_args["check_same_thread"] = False
  return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def get_engine(request: Request) -> Engine:
  return request.app.state.engine


def get_session(engine: Engine = Depends(get_engine)) -> Iterator[Session]:
  with Session(engine) as session:
    yield session


def get_settings(request: Request) -> Settings:
  return request.app.state.settings


def get_page_cache(request: Request) -> PageCache:
  return request.app.state.page_cache
