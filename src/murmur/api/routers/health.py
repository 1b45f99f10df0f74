"""Health check endpoints for murmur.

Provides Kubernetes-compatible liveness and readiness probes:
- /health/live  - Liveness probe (always returns OK if process is running)
- /health/ready - Readiness probe (checks database, cache and event bus)

The cache is reported but never makes the instance unready: reads fall back
to the database while it is down.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from murmur.api.deps import RuntimeDep

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 5.0  # seconds


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_component(
    name: str,
    check: Callable[[], Awaitable[bool]],
    failure_status: HealthStatus = HealthStatus.UNHEALTHY,
) -> ComponentHealth:
    """Run one connectivity check, bounded by CHECK_TIMEOUT."""
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy = False
        message = f"{name} check timed out"
    except Exception as e:
        healthy = False
        message = str(e)
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if healthy else failure_status,
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe.

    Returns OK if the process is running.
    """
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(runtime: RuntimeDep) -> JSONResponse:
    """Readiness probe.

    Returns 200 unless the database or the event bus is unreachable.
    """
    components = list(
        await asyncio.gather(
            check_component("database", runtime.check_database),
            check_component("redis", runtime.cache.health_check, HealthStatus.DEGRADED),
            check_component("event_bus", runtime.event_bus.health_check),
        )
    )

    if all(c.status == HealthStatus.HEALTHY for c in components):
        overall_status = HealthStatus.HEALTHY
    elif any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    else:
        overall_status = HealthStatus.DEGRADED

    return JSONResponse(
        content={
            "status": overall_status.value,
            "components": [c.to_dict() for c in components],
        },
        status_code=503 if overall_status == HealthStatus.UNHEALTHY else 200,
    )
