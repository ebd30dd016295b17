"""Health check API endpoint."""

from __future__ import annotations

import time
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.routes.posts import get_post_store
from core.health import HealthChecker
from core.persistence.interfaces import PostStore

router = APIRouter(prefix="/health", tags=["health"])

# Track API start time
_api_start_time = time.time()


class ComponentHealth(BaseModel):
    """Health status for a single component."""

    status: Literal["ok", "degraded", "error"]
    message: str
    latency_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None


@router.get("")
async def health_check(store: PostStore = Depends(get_post_store)):
    """Get service health.

    Returns database connectivity/latency and API uptime. Responds 503 when the
    database is unreachable so container orchestrators can react.
    """
    checks = await HealthChecker(store).check_all()

    uptime_seconds = int(time.time() - _api_start_time)

    result: dict[str, Any] = {
        "api": {
            "status": "ok",
            "uptime_seconds": uptime_seconds,
            "message": "API running",
        }
    }

    for component, status in checks.items():
        result[component] = ComponentHealth(
            status=status.status,
            message=status.message or "",
            latency_ms=status.latency_ms,
            details=status.details,
        ).model_dump(exclude_none=True)

    # Overall status is worst of all components
    all_statuses = [result["api"]["status"]] + [v.status for v in checks.values()]
    if "error" in all_statuses:
        overall_status = "error"
    elif "degraded" in all_statuses:
        overall_status = "degraded"
    else:
        overall_status = "ok"

    result["overall"] = {"status": overall_status}

    return JSONResponse(status_code=503 if overall_status == "error" else 200, content=result)
