"""Reusable health-check router.

``/health/live`` answers as long as the process is up; ``/health/ready``
runs every registered async probe (this service registers the database)
and returns 503 when any of them fails.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Response, status

HealthCheck = Callable[[], Awaitable[bool]]


def create_health_router(
    readiness_checks: list[HealthCheck] | None = None,
    *,
    service_name: str = "rndc",
) -> APIRouter:
    """Build a health router with optional readiness probes."""
    router = APIRouter(prefix="/health", tags=["health"])
    checks = readiness_checks or []

    @router.get("/live", summary="Liveness probe")
    async def liveness() -> dict[str, str]:
        return {"status": "alive", "service": service_name}

    @router.get("/ready", summary="Readiness probe")
    async def readiness(response: Response) -> dict[str, Any]:
        results: dict[str, str] = {}

        for check in checks:
            name = getattr(check, "__name__", str(check))
            try:
                results[name] = "ok" if await check() else "failing"
            except Exception as exc:
                results[name] = f"error: {exc}"

        all_ok = all(value == "ok" for value in results.values())
        if not all_ok:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

        return {
            "status": "ready" if all_ok else "unavailable",
            "service": service_name,
            "checks": results,
        }

    return router
