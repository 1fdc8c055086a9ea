"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager
from pathlib import Path

import redis
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api import auth_router, files_router
from .core.cache import create_cache, get_cache
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .database import create_db_engine, create_session_factory, get_db, init_schema
from .exceptions import FilesManagerException
from .middleware.exception_handler import files_manager_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .services.placement import ensure_directory

API_VERSION = "1.0.0"

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in a connection URL for safe logging."""
    return re.sub(r'://([^:/@]*):([^@]+)@', r'://\1:***@', url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store clients on startup and release them on shutdown."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        for finding in settings.production_findings():
            logger.warning(f"CONFIG: {finding}")

    # --- Document store ---
    engine = create_db_engine(settings.database_url, settings)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        init_schema(engine)
    except SQLAlchemyError as e:
        logger.critical(
            "Database unavailable.\n"
            f"  DATABASE_URL: {_mask_url(settings.database_url)}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # --- Cache store ---
    # Connects lazily; an outage shows up as 503 on session checks and in /health.
    cache = create_cache(settings.redis_url)
    app.state.cache = cache

    # --- Content storage ---
    app.state.storage_root = settings.folder_path
    ensure_directory(Path(settings.folder_path))

    logger.info(
        "Files manager API started | env=%s | db=%s | storage=%s",
        settings.environment.value,
        engine.dialect.name,
        settings.folder_path,
    )

    yield  # App runs here

    cache.close()
    engine.dispose()
    logger.info("Files manager API stopped")


app = FastAPI(
    title="Files Manager API",
    description=(
        "Token-authenticated file and folder management.\n\n"
        "**Authentication:** `GET /connect` with a Basic `Authorization` header "
        "returns a session token valid for 24 hours. Send it in the `X-Token` "
        "header. Public file content can be fetched without a token."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization", "X-Token"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(FilesManagerException, files_manager_exception_handler)

app.include_router(auth_router)
app.include_router(files_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Files Manager API",
        "version": API_VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(
    db: Session = Depends(get_db),
    cache: redis.Redis = Depends(get_cache),
):
    """Database and cache status plus uptime.

    Never raises; returns degraded status so load balancers can still
    probe without receiving 5xx.
    """
    db_status = "ok"
    file_count = 0
    try:
        file_count = db.execute(text("SELECT COUNT(*) FROM files")).scalar() or 0
    except SQLAlchemyError:
        db_status = "error"

    cache_status = "ok"
    try:
        cache.ping()
    except redis.RedisError:
        cache_status = "error"

    healthy = db_status == "ok" and cache_status == "ok"
    return {
        "status": "healthy" if healthy else "degraded",
        "db": db_status,
        "cache": cache_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": API_VERSION,
        "file_count": file_count,
    }
