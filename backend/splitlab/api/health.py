"""Health check endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
import redis

from splitlab.database import get_db
from splitlab.config import Settings, get_settings
from splitlab.dependencies import get_config_store
from splitlab.services.experiment_config import ExperimentConfigStore

router = APIRouter()


@router.get("/health")
@router.head("/health")
async def health_check():
    """Basic health check."""
    return {"status": "healthy", "service": "splitlab-backend"}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    config_store: ExperimentConfigStore = Depends(get_config_store)
):
    """
    Detailed health check: database, Redis (when it backs the experiment
    logs) and the number of experiments currently configured.
    """
    checks = {
        "api": "healthy",
        "database": "unknown",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    # Check Redis
    if settings.log_store_backend == "redis":
        try:
            redis_client = redis.from_url(settings.redis_url)
            redis_client.ping()
            checks["redis"] = "healthy"
        except Exception as e:
            checks["redis"] = f"unhealthy: {str(e)}"

    # Overall status
    overall_status = "healthy" if all(
        v == "healthy" for v in checks.values()
    ) else "degraded"

    return {
        "status": overall_status,
        "checks": checks,
        "log_store": settings.log_store_backend,
        "experiments_configured": len(config_store.get_experiments())
    }
