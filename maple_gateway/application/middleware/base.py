"""
Attempt Middleware Base

Hooks the access service runs around every transport attempt, in list order:

Attempt flow:  admitted -> MW1.before_call -> MW2.before_call -> transport
Outcome flow:  MW1.after_success / MW1.after_failure -> MW2 ... (same order)

A hook must not raise; an exception escaping a hook is logged and swallowed
by the runner so observability can never change a fetch result.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from maple_gateway.core.exceptions import DomainError
from maple_gateway.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AttemptContext:
    """
    One transport attempt as seen by middleware.

    Attributes:
        endpoint: Endpoint identifier or path
        params: Request parameters (redact before logging)
        category: Rate-limit category name
        attempt: 1-based attempt number
        started_at: Clock time the transport call started
        request_id: Correlation id of the enclosing fetch
        extras: Scratch space shared between hooks of one attempt
    """

    endpoint: str
    params: dict[str, Any]
    category: str
    attempt: int
    started_at: float
    request_id: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


class AttemptMiddleware:
    """Base class; every hook is a no-op."""

    async def before_call(self, ctx: AttemptContext) -> None:
        pass

    async def after_success(self, ctx: AttemptContext, result: Any, elapsed: float) -> None:
        pass

    async def after_failure(self, ctx: AttemptContext, error: DomainError, elapsed: float) -> None:
        pass


class MiddlewareChain:
    """Runs a list of AttemptMiddleware in order."""

    def __init__(self, middleware: Sequence[AttemptMiddleware] = ()):
        self._middleware = list(middleware)

    def __iter__(self):
        return iter(self._middleware)

    def __len__(self) -> int:
        return len(self._middleware)

    async def before_call(self, ctx: AttemptContext) -> None:
        for mw in self._middleware:
            await self._run(mw, "before_call", ctx)

    async def after_success(self, ctx: AttemptContext, result: Any, elapsed: float) -> None:
        for mw in self._middleware:
            await self._run(mw, "after_success", ctx, result, elapsed)

    async def after_failure(self, ctx: AttemptContext, error: DomainError, elapsed: float) -> None:
        for mw in self._middleware:
            await self._run(mw, "after_failure", ctx, error, elapsed)

    @staticmethod
    async def _run(mw: AttemptMiddleware, hook: str, *args) -> None:
        try:
            await getattr(mw, hook)(*args)
        except Exception as e:
            logger.warning(
                "Attempt middleware hook failed",
                middleware=type(mw).__name__,
                hook=hook,
                error=str(e),
                error_type=type(e).__name__,
            )
