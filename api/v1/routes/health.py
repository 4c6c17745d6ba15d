from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from common.core.config import settings
from common.db.session import get_db
from common.core.otel_axiom_exporter import get_logger
from common.providers.api_keys import APIProviderType, get_rotator
from common.providers.rate_limiter.limiter import limiter

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check(request: Request):
    # No rate limiting or logging - k8s health checks hit this every 5-10s
    return {"status": "healthy", "service": settings.app_name}


@router.get("/db")
@limiter.limit("100/minute")
async def db_check(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "database": "disconnected"}


@router.get("/providers")
@limiter.limit("100/minute")
async def providers_check(request: Request):
    """Healthy key counts for the safe and sensitive AI routes."""
    routes = {
        "safe": settings.safe_ai_provider,
        "sensitive": settings.sensitive_ai_provider,
    }
    report = {}
    for route, provider in routes.items():
        rotator = get_rotator(APIProviderType(provider.lower()))
        report[route] = {
            "provider": provider,
            "healthyKeys": rotator.get_healthy_key_count(),
        }
    degraded = any(entry["healthyKeys"] == 0 for entry in report.values())
    return {"status": "degraded" if degraded else "healthy", "routes": report}
