"""Liveness and dependency health endpoints"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from redis.exceptions import RedisError

from beautybook.config.database import get_db
from beautybook.config.redis import ping_redis

logger = logging.getLogger(__name__)
health_router = APIRouter()


@health_router.get("/")
async def health_check():
    return {"status": "healthy", "service": "beautybook-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Bookings need the database; Redis only carries status notifications,
    so a Redis outage reports "degraded" rather than "unhealthy".
    """
    checks = {"api": "healthy"}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unreachable: {e}")
        checks["database"] = f"unhealthy: {e}"

    try:
        checks["notification_broker"] = "healthy" if await ping_redis() else "unhealthy: no PONG"
    except (RedisError, OSError) as e:
        logger.warning(f"Health check: notification broker unreachable: {e}")
        checks["notification_broker"] = f"unhealthy: {e}"

    if checks["database"] != "healthy":
        checks["overall"] = "unhealthy"
    elif checks["notification_broker"] != "healthy":
        checks["overall"] = "degraded"
    else:
        checks["overall"] = "healthy"

    return checks
