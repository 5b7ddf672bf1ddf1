"""
Health check endpoint.

GET /api/health — checks MongoDB connectivity and reports delivery queue load.
Rules:
- MongoDB failure → "unhealthy" (503) — accounts cannot be served without it.
- Delivery worker not running → "degraded" (200) — notifications are auxiliary.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        db = request.app.state.db
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    queue = getattr(request.app.state, "delivery_queue", None)
    delivery: dict[str, int] = {}
    if queue is None or not queue.running:
        checks["delivery_worker"] = "stopped"
        if overall == "healthy":
            overall = "degraded"
    else:
        checks["delivery_worker"] = "ok"
    if queue is not None:
        delivery = queue.stats()

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(
            status=overall, checks=checks, delivery=delivery
        ).model_dump(),
    )
