# config.py
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from errors import ConfigurationError

DEFAULT_CORS_ORIGINS = "http://127.0.0.1:5173,http://localhost:5173"
TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
  database_url: str
  db_sslmode: str = "require"
  seed_enabled: bool = False
  seed_token: Optional[str] = None
  bcrypt_rounds: int = Field(default=10, ge=4, le=31)
  seed_concurrency: int = Field(default=10, ge=1)
  cors_origins: List[str] = Field(default_factory=list)
  log_level: str = "INFO"


def _split_csv(raw: str) -> List[str]:
  return [x.strip() for x in raw.split(",") if x.strip()]


def _int_env(name: str, default: int) -> int:
  raw = os.getenv(name, "").strip()
  if not raw:
    return default
  try:
    return int(raw)
  except ValueError:
    raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def cors_origins_from_env() -> List[str]:
  load_dotenv()
  return _split_csv(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS))


def load_settings() -> Settings:
  """Read settings from the environment (and a .env file, if present)."""
  load_dotenv()

  database_url = (os.getenv("POSTGRES_URL") or os.getenv("DATABASE_URL") or "").strip()
  if not database_url:
    raise ConfigurationError("POSTGRES_URL is not set in backend .env")

  return Settings(
    database_url=database_url,
    db_sslmode=os.getenv("DB_SSLMODE", "require").strip(),
    seed_enabled=os.getenv("SEED_ENABLED", "").strip().lower() in TRUTHY,
    seed_token=os.getenv("SEED_TOKEN", "").strip() or None,
    bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 10),
    seed_concurrency=_int_env("SEED_CONCURRENCY", 10),
    cors_origins=cors_origins_from_env(),
    log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
  )


def configure_logging(level: str) -> None:
  logging.basicConfig(
    level=getattr(logging, level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )
