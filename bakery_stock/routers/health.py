"""
Liveness and readiness checks.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import select, text
from sqlalchemy.orm import Session
import redis

from bakery_stock.core.config import get_settings
from bakery_stock.db.session import get_db
from bakery_stock.models.store import Store

router = APIRouter(tags=["health"])
settings = get_settings()


def check_database(db: Session) -> dict:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "error", "message": str(e)}
    return {"status": "ok"}


def check_production_center(db: Session) -> dict:
    """Deliveries and production cannot be recorded until this store exists."""
    name = settings.PRODUCTION_CENTER_STORE_NAME
    try:
        found = db.execute(select(Store.id).where(Store.name == name)).first() is not None
    except Exception as e:
        return {"status": "error", "message": str(e)}
    if not found:
        return {"status": "missing", "message": f"No store named {name!r}"}
    return {"status": "ok"}


def check_redis() -> dict:
    try:
        redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2).ping()
    except redis.ConnectionError:
        return {"status": "unavailable", "message": "Redis not connected"}
    except redis.RedisError as e:
        return {"status": "error", "message": str(e)}
    return {"status": "ok"}


@router.get("/health")
async def health_check():
    """Basic health check - always returns OK."""
    return {"status": "ok"}


@router.get("/api/health")
def api_health_check(db: Session = Depends(get_db)):
    """
    Readiness check.

    503 when the database is unreachable. A missing production center
    marks the service "degraded"; Redis is reported but never fails it.
    """
    services = {"database": check_database(db)}
    if services["database"]["status"] != "ok":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "services": services},
        )

    services["production_center"] = check_production_center(db)
    services["redis"] = check_redis()

    overall = "ok" if services["production_center"]["status"] == "ok" else "degraded"
    return {"status": overall, "services": services}
