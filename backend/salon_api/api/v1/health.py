import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from salon_api.core.cache import get_cache
from salon_api.core.config import settings
from salon_api.db import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="Health check")
def read_health() -> dict[str, str]:
    """Return basic service health information."""
    return {"status": "ok", "environment": settings.ENVIRONMENT}


@router.get("/ready", summary="Readiness check")
def read_ready():
    """Check that the database answers (readiness probe)."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "database": "disconnected",
                "error": str(e) if settings.ENVIRONMENT != "production" else "Database connection failed",
            },
        )

    cache = "memory" if get_cache().is_memory else "redis"
    return {"status": "ready", "database": "connected", "cache": cache}
