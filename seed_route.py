# seed_route.py
# Reset and reseed the database:
#   curl -H "X-Seed-Token: $SEED_TOKEN" http://localhost:8000/seed
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from actions import INVOICES_PATH
from cache import PageCache
from config import Settings
from db import get_engine, get_page_cache, get_settings
from errors import SeedAuthorizationError, SeedingDisabledError
from seed import seed_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seed"])


def authorize_seed(settings: Settings, token: Optional[str]) -> None:
  if not settings.seed_enabled:
    raise SeedingDisabledError("Seeding is disabled")
  if settings.seed_token and not secrets.compare_digest(token or "", settings.seed_token):
    raise SeedAuthorizationError("Invalid seed token")


@router.get("/seed")
async def seed(
  x_seed_token: Optional[str] = Header(None),
  settings: Settings = Depends(get_settings),
  engine: Engine = Depends(get_engine),
  cache: PageCache = Depends(get_page_cache),
):
  try:
    authorize_seed(settings, x_seed_token)
  except SeedingDisabledError as e:
    logger.warning("Seed request refused: %s", e)
    return JSONResponse(status_code=403, content={"error": str(e)})
  except SeedAuthorizationError as e:
    logger.warning("Seed request refused: %s", e)
    return JSONResponse(status_code=401, content={"error": str(e)})

  try:
    await seed_database(engine, bcrypt_rounds=settings.bcrypt_rounds, limit=settings.seed_concurrency)
  except Exception as e:
    logger.exception("Error seeding database")
    return JSONResponse(status_code=500, content={"error": str(e) or e.__class__.__name__})
  finally:
    # tables are dropped before the transaction, so even a failed seed changes the listing
    cache.revalidate_path(INVOICES_PATH)

  return {"message": "Database seeded successfully"}
