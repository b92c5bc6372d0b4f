"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter

from racebook.core.config import settings
from racebook.core.rate_limit import STORAGE_URI

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {"status": "healthy", "version": settings.app_version}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """Readiness: "ready" once Supabase is configured, "degraded" otherwise."""
    return {
        "status": "ready" if settings.supabase_configured else "degraded",
        "supabase": settings.supabase_configured,
        "jwt_secret": bool(settings.supabase_jwt_secret),
        "rate_limit_backend": "memory" if STORAGE_URI == "memory://" else "redis",
    }
