"""Health checks and monitoring endpoints"""
import logging

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bossofclean.config.database import get_db
from bossofclean.config.redis import get_redis
from bossofclean.config.settings import get_settings

health_router = APIRouter()
logger = logging.getLogger(__name__)


@health_router.get("/")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "bossofclean-availability"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check with dependencies"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "overall": "unknown"
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        checks["database"] = f"unhealthy: {str(e)}"

    # Redis only backs the booking lock
    if get_settings().BOOKING_LOCK_ENABLED:
        try:
            get_redis().ping()
            checks["redis"] = "healthy"
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            checks["redis"] = f"unhealthy: {str(e)}"
    else:
        checks["redis"] = "disabled"

    # Overall status
    if all(status == "healthy" for status in checks.values() if status not in ("unknown", "disabled")):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
