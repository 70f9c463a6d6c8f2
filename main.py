# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from cache import PageCache
from config import Settings, configure_logging, cors_origins_from_env, load_settings
from db import create_db_engine
from invoice_route import router as invoice_router
from schemas import ErrorResponse
from seed_route import router as seed_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
  """Build the app. Settings and engine are read from the environment at
  startup unless given here."""

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    if app.state.settings is None:
      app.state.settings = load_settings()
      configure_logging(app.state.settings.log_level)
    owns_engine = app.state.engine is None
    if owns_engine:
      app.state.engine = create_db_engine(app.state.settings)
    logger.info("Using %s database", app.state.engine.dialect.name)
    try:
      yield
    finally:
      if owns_engine:
        app.state.engine.dispose()
        app.state.engine = None

  app = FastAPI(title="Invoice Dashboard Backend", version="1.0.0", lifespan=lifespan)
  app.state.settings = settings
  app.state.engine = engine
  app.state.page_cache = PageCache()

  # CORS must be known at construction time
  origins = settings.cors_origins if settings else cors_origins_from_env()
  app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )

  app.include_router(invoice_router)
  app.include_router(seed_router)

  @app.get("/health")
  def health():
    return {"ok": True, "database": app.state.engine.dialect.name}

  @app.exception_handler(HTTPException)
  async def http_exception_handler(request, exc):
    return JSONResponse(
      status_code=exc.status_code,
      content=ErrorResponse(error=str(exc.detail), details=f"Status Code: {exc.status_code}").model_dump(),
    )

  @app.exception_handler(Exception)
  async def general_exception_handler(request, exc):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
      status_code=500,
      content=ErrorResponse(error="Internal server error", details=str(exc)).model_dump(),
    )

  return app


app = create_app()


if __name__ == "__main__":
  import uvicorn
  uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
