"""
Health Check Endpoints

Provides:
1. /health - Configuration and catalog health
2. /health/live - Simple liveness probe (for k8s)
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from config.settings import Settings
from web.dependencies import get_app_settings, get_catalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Application start time for uptime calculation
_start_time = datetime.utcnow()


def _check_catalog() -> Dict[str, Any]:
    """Make sure the route catalog loads and validates."""
    try:
        catalog = get_catalog()
    except Exception as e:
        logger.error(f"Route catalog health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "routes": len(catalog)}


def _check_supabase(settings: Settings) -> Dict[str, Any]:
    supabase = settings.supabase
    if not supabase.is_configured or not supabase.anon_key:
        status = "unhealthy" if settings.is_production else "warning"
        return {"status": status, "message": "Supabase project is not configured"}
    return {"status": "healthy", "functions_url": supabase.functions_url}


@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    """
    Health check endpoint.

    Returns 200 if all checks pass (or only warn), 503 if any check is unhealthy.
    """
    checks = {
        "catalog": _check_catalog(),
        "supabase": _check_supabase(settings),
    }

    statuses = [c.get("status", "unknown") for c in checks.values()]
    if "unhealthy" in statuses:
        overall_status = "unhealthy"
        status_code = 503
    elif "warning" in statuses:
        overall_status = "degraded"
        status_code = 200
    else:
        overall_status = "healthy"
        status_code = 200

    uptime = datetime.utcnow() - _start_time
    response = {
        "status": overall_status,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "uptime": str(uptime).split(".")[0],
        "version": settings.version,
        "environment": settings.environment,
        "checks": checks,
    }
    return JSONResponse(content=response, status_code=status_code)


@router.get("/health/live")
async def liveness_probe() -> Response:
    """Liveness probe: if the server responds, it's alive."""
    return Response(content="OK", media_type="text/plain")
