"""
Request Logging Middleware

Logs every transport attempt: the outgoing call, the response latency, and
the classified failure. Params pass through the structlog redaction
processor, so credentials never reach the log.
"""

from typing import Any

from maple_gateway.application.middleware.base import AttemptContext, AttemptMiddleware
from maple_gateway.core.config.constants import Stage
from maple_gateway.core.exceptions import DomainError
from maple_gateway.core.logging import get_logger, log_stage

logger = get_logger(__name__)


class RequestLoggingMiddleware(AttemptMiddleware):
    """
    Log request / response / failure for each attempt.

    LOGGED FIELDS:
    --------------
    - endpoint, category, attempt
    - params (redacted)
    - duration_ms on completion
    - kind / sub_kind / http_status / retryable on failure
    """

    def __init__(self, logger_instance=None):
        self._logger = logger_instance or logger

    async def before_call(self, ctx: AttemptContext) -> None:
        log_stage(
            self._logger,
            Stage.TRANSPORT,
            "API request",
            level="debug",
            endpoint=ctx.endpoint,
            category=ctx.category,
            attempt=ctx.attempt,
            params=ctx.params,
        )

    async def after_success(self, ctx: AttemptContext, result: Any, elapsed: float) -> None:
        log_stage(
            self._logger,
            Stage.TRANSPORT,
            "API response",
            level="debug",
            endpoint=ctx.endpoint,
            attempt=ctx.attempt,
            duration_ms=round(elapsed * 1000, 2),
        )

    async def after_failure(self, ctx: AttemptContext, error: DomainError, elapsed: float) -> None:
        log_stage(
            self._logger,
            Stage.TRANSPORT,
            "API request failed",
            level="warning",
            endpoint=ctx.endpoint,
            attempt=ctx.attempt,
            duration_ms=round(elapsed * 1000, 2),
            kind=error.kind.value,
            sub_kind=error.sub_kind,
            http_status=error.http_status,
            retryable=error.retryable,
        )
