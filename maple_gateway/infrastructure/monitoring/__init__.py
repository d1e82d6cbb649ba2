"""
Monitoring Infrastructure

Health checks over the access service.
"""

from .health_checker import HealthChecker, HealthStatus

__all__ = [
    "HealthChecker",
    "HealthStatus",
]
