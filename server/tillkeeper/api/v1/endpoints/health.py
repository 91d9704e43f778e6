from fastapi import APIRouter, Depends, status as http_status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from typing import Dict, Any
import logging
import sys
import time
from datetime import datetime, timezone

from tillkeeper.core.config import settings
from tillkeeper.core.database import get_db, engine

router = APIRouter()
logger = logging.getLogger(__name__)

SERVICE_NAME = "Tillkeeper API"

# Track server startup time for uptime calculation
SERVER_START_TIME = time.time()


async def get_database_info(db: AsyncSession) -> Dict[str, Any]:
    """Connectivity, dialect and current migration of the database."""
    db_info: Dict[str, Any] = {
        "status": "unknown",
        "dialect": engine.dialect.name,
        "migration_version": None,
    }

    try:
        await db.execute(text("SELECT 1"))
        db_info["status"] = "connected"
    except Exception as e:
        db_info["status"] = "disconnected"
        db_info["error"] = str(e)
        logger.error(f"Database connection error in health check: {str(e)}", exc_info=True)
        return db_info

    try:
        result = await db.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        db_info["migration_version"] = result.scalar_one_or_none()
    except Exception as e:
        # Fresh databases created without Alembic have no version table
        logger.debug(f"Could not read migration version: {e}")
        await db.rollback()

    return db_info


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check with service, database and configuration details.

    Returns:
        - 200 OK: Service is healthy
        - 503 Service Unavailable: Database is unreachable
    """
    uptime_seconds = time.time() - SERVER_START_TIME
    db_info = await get_database_info(db)

    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": {
            "name": SERVICE_NAME,
            "version": "1.0.0",
            "uptime_seconds": round(uptime_seconds, 2),
        },
        "system": {
            "python_version": sys.version.split()[0],
        },
        "database": db_info,
        "configuration": {
            "environment": settings.ENVIRONMENT,
            "business_timezone": settings.BUSINESS_TIMEZONE,
            "currency_symbol": settings.CURRENCY_SYMBOL,
            "cors_origins_configured": bool(settings.CORS_ORIGINS),
        },
    }

    http_code = http_status.HTTP_200_OK
    if db_info.get("status") != "connected":
        health_status["status"] = "unhealthy"
        http_code = http_status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=http_code, content=health_status)


@router.get("/health/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready to accept traffic only when the database answers."""
    try:
        await db.execute(text("SELECT 1"))
        return JSONResponse(
            status_code=http_status.HTTP_200_OK,
            content={"status": "ready", "service": SERVICE_NAME},
        )
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": SERVICE_NAME,
                "error": "Database connection failed",
            },
        )


@router.get("/health/live")
async def liveness_check():
    """The process is up; the database is not checked."""
    return JSONResponse(
        status_code=http_status.HTTP_200_OK,
        content={"status": "alive", "service": SERVICE_NAME},
    )
