"""Liveness and readiness endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.config import get_settings
from wtd.database import get_session
from wtd.redis_client import get_redis

router = APIRouter(prefix="/api/health")


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe — returns 200 if the process is alive."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
async def readiness(
    response: Response,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe — database is required, Redis is advisory."""
    checks: dict[str, object] = {}

    # Database check
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"

    # Redis check (cache only)
    if get_settings().cache_enabled:
        try:
            redis = get_redis()
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    if checks["database"] != "ok":
        response.status_code = 503
        status = "unhealthy"
    elif all(v == "ok" for v in checks.values()):
        status = "ready"
    else:
        status = "degraded"
    return {"status": status, "checks": checks}
