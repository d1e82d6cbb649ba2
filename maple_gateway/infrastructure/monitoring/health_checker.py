#!/usr/bin/env python3
"""
Health Checker Module

Health checks for the access layer components:
- Cache utilization
- Admission queue backlog per rate-limit category
- Attempt failure rate (from MetricsMiddleware)
- Optional live probe through the access service

Author: System Architect
Date: 2026-09-28
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from maple_gateway.core.exceptions import DomainError
from maple_gateway.core.logging import get_logger

if TYPE_CHECKING:
    from maple_gateway.application.services.access_service import AccessService

logger = get_logger(__name__)

CACHE_DEGRADED_UTILIZATION = 90.0
# Backlog worth this many seconds of admissions counts as degraded
QUEUE_DEGRADED_SECONDS = 10
FAILURE_RATE_DEGRADED = 0.5
FAILURE_RATE_MIN_SAMPLES = 5
PROBE_ENDPOINT = "ranking.overall"


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthChecker:
    """
    Health checker for the access service.

    STAGE-H: Health check orchestration

    Usage:
        checker = HealthChecker(service)

        report = await checker.check_health()             # local state only
        report = await checker.check_health(probe=True)   # plus one live API call
    """

    def __init__(self, service: "AccessService"):
        self._service = service

    async def check_health(self, probe: bool = False) -> dict[str, Any]:
        """
        Aggregated health report.

        STAGE-H.1: Component checks

        Overall status is the worst component status.
        """
        components = {
            "cache": self.check_cache(),
            "admission": self.check_admission(),
            "attempts": self.check_attempts(),
        }
        if probe:
            components["nexon_api"] = await self.check_api()

        statuses = {component["status"] for component in components.values()}
        if HealthStatus.UNHEALTHY.value in statuses:
            status = HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED.value in statuses:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.HEALTHY

        report = {
            "status": status.value,
            "timestamp": _timestamp(),
            "components": components,
        }
        if status is not HealthStatus.HEALTHY:
            logger.warning(
                "Health check not healthy",
                stage="H.1",
                status=status.value,
                components=[name for name, c in components.items() if c["status"] != "healthy"],
            )
        return report

    def check_cache(self) -> dict[str, Any]:
        stats = self._service.cache.stats()
        degraded = stats["utilization_percent"] >= CACHE_DEGRADED_UTILIZATION
        return {
            "status": (HealthStatus.DEGRADED if degraded else HealthStatus.HEALTHY).value,
            "details": stats,
        }

    def check_admission(self) -> dict[str, Any]:
        stats = self._service.admission.stats()
        backlogged = [
            name
            for name, queue in stats.items()
            if queue["pending"] >= queue["requests_per_second"] * QUEUE_DEGRADED_SECONDS
        ]
        result = {
            "status": (HealthStatus.DEGRADED if backlogged else HealthStatus.HEALTHY).value,
            "details": stats,
        }
        if backlogged:
            result["backlogged_categories"] = backlogged
        return result

    def check_attempts(self) -> dict[str, Any]:
        metrics = self._service.metrics
        if metrics is None:
            return {"status": HealthStatus.HEALTHY.value, "details": "not_configured"}

        snapshot = metrics.snapshot()
        completed = snapshot["successes"] + snapshot["failures"]
        degraded = (
            completed >= FAILURE_RATE_MIN_SAMPLES
            and snapshot["failure_rate"] >= FAILURE_RATE_DEGRADED
        )
        return {
            "status": (HealthStatus.DEGRADED if degraded else HealthStatus.HEALTHY).value,
            "details": snapshot,
        }

    async def check_api(self) -> dict[str, Any]:
        """
        Live probe: one uncached overall-ranking request for yesterday.

        STAGE-H.2: Upstream probe
        """
        yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).date().isoformat()
        clock = self._service.retry.clock
        started = clock.now()
        try:
            await self._service.fetch(PROBE_ENDPOINT, {"date": yesterday}, use_cache=False)
        except DomainError as e:
            return {
                "status": HealthStatus.UNHEALTHY.value,
                "endpoint": PROBE_ENDPOINT,
                "error": e.to_dict(),
            }
        return {
            "status": HealthStatus.HEALTHY.value,
            "endpoint": PROBE_ENDPOINT,
            "response_time_ms": round((clock.now() - started) * 1000, 2),
        }
