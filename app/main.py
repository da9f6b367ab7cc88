"""
HR Workflow Backend - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from app.core.logging import setup_logging
from app.db.init_db import seed_default_positions
from app.db.session import SessionLocal

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


app = FastAPI(
    title="HR Workflow Backend",
    description="Employee lifecycle and workflow audit service",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s (env=%s)", masked, settings.APP_ENV)


@app.on_event("startup")
def bootstrap_positions() -> None:
    """
    Make sure the default positions (including the privileged one) exist.
    Employees can only be assigned positions that are in the catalogue.
    """
    db = SessionLocal()
    try:
        created = seed_default_positions(db)
        if created:
            logger.info("Seeded %d default positions", created)
        else:
            logger.info("Default positions already present, skipping bootstrap")
    except OperationalError as e:
        # Tables might not exist yet
        db.rollback()
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping position bootstrap")
        else:
            logger.error("Database error during position bootstrap: %s", e)
    finally:
        db.close()


def _is_no_such_table(err: BaseException) -> bool:
    return "no such table" in str(err).lower()


async def _handle_operational_error(request, exc: Exception):
    if _is_no_such_table(exc):
        return JSONResponse(
            status_code=500,
            content={"detail": "Run alembic upgrade head"},
        )
    return await generic_exception_handler(request, exc)


app.add_exception_handler(OperationalError, _handle_operational_error)
