"""
Attempt Middleware Package

Before-call / after-success / after-failure hooks run around every
transport attempt, in list order.

AVAILABLE MIDDLEWARE:
---------------------
1. RequestLoggingMiddleware: log each attempt and its outcome
2. MetricsMiddleware: Prometheus counters for attempts and outcomes per kind,
   plus an attempt latency histogram

USAGE EXAMPLE:
--------------
    from maple_gateway.application.middleware import default_middleware

    service = build_access_service(settings, middleware=default_middleware())
"""

from .base import AttemptContext, AttemptMiddleware, MiddlewareChain
from .metrics import MetricsMiddleware
from .request_logging import RequestLoggingMiddleware


def default_middleware() -> list[AttemptMiddleware]:
    """Logging first, then metrics."""
    return [RequestLoggingMiddleware(), MetricsMiddleware()]


__all__ = [
    "AttemptContext",
    "AttemptMiddleware",
    "MiddlewareChain",
    "MetricsMiddleware",
    "RequestLoggingMiddleware",
    "default_middleware",
]
