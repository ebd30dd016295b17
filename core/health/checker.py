"""Health check logic for system components."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal, Optional

from core.persistence.interfaces import PostStore

# Round-trips slower than this are reported as degraded.
DEGRADED_LATENCY_MS = 500.0


@dataclass
class HealthStatus:
    """Health status for a component."""

    status: Literal["ok", "degraded", "error"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    details: Optional[dict] = None


class HealthChecker:
    """Health checker for system components."""

    def __init__(self, store: PostStore, *, timeout: float = 2.0):
        """Initialize health checker.

        Args:
            store: Post store whose backend is probed.
            timeout: Seconds allowed for the database round-trip.
        """
        self.store = store
        self.timeout = timeout

    async def check_database(self) -> HealthStatus:
        """Check database connectivity and measure latency."""
        start_time = time.perf_counter()
        try:
            await self.store.ping(timeout=self.timeout)
        except Exception as exc:
            return HealthStatus(
                status="error",
                message=f"Database error: {type(exc.__cause__ or exc).__name__}",
            )
        latency_ms = round((time.perf_counter() - start_time) * 1000, 2)

        if latency_ms > DEGRADED_LATENCY_MS:
            return HealthStatus(status="degraded", latency_ms=latency_ms, message="Slow response")
        return HealthStatus(status="ok", latency_ms=latency_ms, message="Database connected")

    async def check_all(self) -> dict[str, HealthStatus]:
        return {"database": await self.check_database()}
