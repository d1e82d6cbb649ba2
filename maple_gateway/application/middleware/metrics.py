"""
Attempt Metrics Middleware

Prometheus metrics over transport attempts:
- attempts (retried attempts counted separately)
- successes, and failures labelled by error kind
- attempt latency histogram and the slowest attempt seen

Architectural Decision: one CollectorRegistry per middleware instance
- Several AccessService instances (and tests) never share counters
- `registry` can be mounted on an exporter by the embedding application
"""

from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from maple_gateway.application.middleware.base import AttemptContext, AttemptMiddleware
from maple_gateway.core.exceptions import DomainError

LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0)


class MetricsMiddleware(AttemptMiddleware):
    """
    Counts attempts and their outcomes.

    Usage:
        metrics = MetricsMiddleware()
        service = build_access_service(settings, middleware=[metrics])
        ...
        metrics.snapshot()["failure_rate"]
        metrics.export()  # Prometheus text format
    """

    def __init__(self, namespace: str = "maple_gateway"):
        self._namespace = namespace
        self.reset()

    def reset(self) -> None:
        ns = self._namespace
        self.registry = CollectorRegistry()
        self._attempts = Counter(
            f"{ns}_attempts", "Transport attempts started", registry=self.registry
        )
        self._retried = Counter(
            f"{ns}_retried_attempts", "Attempts after the first of an operation", registry=self.registry
        )
        self._successes = Counter(
            f"{ns}_attempt_successes", "Attempts that returned a result", registry=self.registry
        )
        self._failures = Counter(
            f"{ns}_attempt_failures",
            "Attempts that failed, by error kind",
            ["kind"],
            registry=self.registry,
        )
        self._latency = Histogram(
            f"{ns}_attempt_latency_seconds",
            "Completed attempt latency",
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )
        self._latency_max = Gauge(
            f"{ns}_attempt_latency_max_seconds", "Slowest completed attempt", registry=self.registry
        )

    async def before_call(self, ctx: AttemptContext) -> None:
        self._attempts.inc()
        if ctx.attempt > 1:
            self._retried.inc()

    async def after_success(self, ctx: AttemptContext, result: Any, elapsed: float) -> None:
        self._successes.inc()
        self._record_latency(elapsed)

    async def after_failure(self, ctx: AttemptContext, error: DomainError, elapsed: float) -> None:
        self._failures.labels(kind=error.kind.value).inc()
        self._record_latency(elapsed)

    def _record_latency(self, elapsed: float) -> None:
        self._latency.observe(elapsed)
        if elapsed > self._sample(f"{self._namespace}_attempt_latency_max_seconds"):
            self._latency_max.set(elapsed)

    def _sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        return self.registry.get_sample_value(name, labels) or 0.0

    @property
    def attempts(self) -> int:
        return int(self._sample(f"{self._namespace}_attempts_total"))

    @property
    def successes(self) -> int:
        return int(self._sample(f"{self._namespace}_attempt_successes_total"))

    @property
    def failures(self) -> int:
        return sum(self.failures_by_kind.values())

    @property
    def retried_attempts(self) -> int:
        return int(self._sample(f"{self._namespace}_retried_attempts_total"))

    @property
    def failures_by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        total_name = f"{self._namespace}_attempt_failures_total"
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name == total_name:
                    counts[sample.labels["kind"]] = int(sample.value)
        return counts

    @property
    def failure_rate(self) -> float:
        completed = self.successes + self.failures
        return self.failures / completed if completed else 0.0

    def snapshot(self) -> dict[str, Any]:
        ns = self._namespace
        completed = int(self._sample(f"{ns}_attempt_latency_seconds_count"))
        latency_sum = self._sample(f"{ns}_attempt_latency_seconds_sum")
        return {
            "attempts": self.attempts,
            "successes": self.successes,
            "failures": self.failures,
            "retried_attempts": self.retried_attempts,
            "failure_rate": round(self.failure_rate, 4),
            "failures_by_kind": self.failures_by_kind,
            "mean_latency_ms": round(latency_sum / completed * 1000, 2) if completed else 0.0,
            "max_latency_ms": round(self._sample(f"{ns}_attempt_latency_max_seconds") * 1000, 2),
        }

    def export(self) -> bytes:
        """Registry contents in the Prometheus text exposition format."""
        return generate_latest(self.registry)
