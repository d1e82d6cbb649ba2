"""
Retry Controller

Runs one logical operation to completion:

    Attempting -> Success
               -> ClassifyingFailure -> RetryScheduled -> Attempting
                                     -> TerminalFailure

Every attempt holds a burst slot for the duration of the transport call and
takes a fresh admission ticket once it has that slot. A TransportFailure is classified into a
DomainError; the retry verdict comes from `decide()`, which combines the
retryability table with the attempt budget. On exhaustion the last classified
error is raised as-is.

Architectural Decision: tenacity drives the loop
- stop/retry/wait/before_sleep are the same hooks the rest of the codebase
  uses for retries
- `retry` and `wait` both read one RetryDecision per failed attempt, so the
  delay that is logged is the delay that is slept
- sleeping goes through the injected Clock

Author: System Architect
Date: 2026-09-28
"""

import random
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from maple_gateway.application.middleware.base import (
    AttemptContext,
    AttemptMiddleware,
    MiddlewareChain,
)
from maple_gateway.core.config.constants import RateCategory, Stage
from maple_gateway.core.exceptions import DomainError
from maple_gateway.core.interfaces import Clock, SystemClock, TransportFailure
from maple_gateway.core.logging import get_logger, get_request_id, log_stage, redact_mapping
from maple_gateway.core.resilience.backoff import BackoffPolicy
from maple_gateway.core.resilience.error_classifier import ErrorClassifier
from maple_gateway.rate_limiting.admission_controller import AdmissionController

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryDecision:
    """
    Verdict for one failed attempt.

    Attributes:
        should_retry: True when another attempt will be made
        delay: Seconds to wait before the next attempt (0 when terminal)
        reason: "retryable", "not_retryable" or "exhausted"
    """

    should_retry: bool
    delay: float = 0.0
    reason: str = "retryable"


@dataclass
class RetryState:
    """Per-operation state, discarded after success or terminal failure."""

    attempt: int = 0
    last_error: DomainError | None = None
    last_decision: RetryDecision | None = None
    total_delay: float = 0.0
    errors: list[DomainError] = field(default_factory=list)


class RetryController:
    """
    Classifies failures and re-attempts retryable ones through admission.

    Usage:
        controller = RetryController(admission, ErrorClassifier(), BackoffPolicy(), max_retries=3)

        data = await controller.execute(
            lambda: transport.perform_call("character.basic", params),
            endpoint="character.basic",
            params=params,
        )
    """

    def __init__(
        self,
        admission: AdmissionController,
        classifier: ErrorClassifier | None = None,
        policy: BackoffPolicy | None = None,
        clock: Clock | None = None,
        max_retries: int = 3,
        rng: random.Random | None = None,
        middleware: Sequence[AttemptMiddleware] = (),
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._admission = admission
        self._classifier = classifier or ErrorClassifier()
        self._policy = policy or BackoffPolicy()
        self._clock = clock or SystemClock()
        self._max_retries = max_retries
        self._rng = rng or random.Random()
        self._middleware = MiddlewareChain(middleware)

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    @property
    def clock(self) -> Clock:
        return self._clock

    def decide(self, error: DomainError, attempt: int) -> RetryDecision:
        """
        Decide whether the failed attempt `attempt` (1-based) is retried.

        This is also the public "should I retry" query for callers holding
        a DomainError.
        """
        if not error.retryable:
            return RetryDecision(should_retry=False, reason="not_retryable")
        if attempt >= self.max_attempts:
            return RetryDecision(should_retry=False, reason="exhausted")
        delay = self._policy.compute_delay(error.kind, attempt, self._rng)
        return RetryDecision(should_retry=True, delay=delay)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        category: RateCategory | None = None,
    ) -> T:
        """
        Run operation with admission, classification and retry.

        STAGE-R: Retry loop

        Args:
            operation: Zero-argument coroutine factory performing one call
            endpoint: Endpoint identifier (for classification and logs)
            params: Request parameters (for classification and logs)
            category: Rate-limit category (derived from endpoint when None)

        Returns:
            The operation's result

        Raises:
            DomainError: The last classified error on terminal failure
        """
        params = dict(params or {})
        category = category or self._admission.category_for(endpoint)
        state = RetryState()

        def should_retry(retry_state: RetryCallState) -> bool:
            outcome = retry_state.outcome
            if outcome is None or not outcome.failed:
                return False
            error = outcome.exception()
            if not isinstance(error, DomainError):
                return False
            state.last_decision = self.decide(error, retry_state.attempt_number)
            return state.last_decision.should_retry

        def wait_for_decision(retry_state: RetryCallState) -> float:
            return state.last_decision.delay if state.last_decision else 0.0

        def before_sleep(retry_state: RetryCallState) -> None:
            delay = state.last_decision.delay if state.last_decision else 0.0
            state.total_delay += delay
            log_stage(
                logger,
                Stage.RETRY,
                "Retry scheduled",
                level="warning",
                endpoint=endpoint,
                attempt=retry_state.attempt_number,
                next_attempt=retry_state.attempt_number + 1,
                delay_seconds=round(delay, 3),
                kind=state.last_error.kind.value if state.last_error else None,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            retry=should_retry,
            wait=wait_for_decision,
            sleep=self._clock.sleep,
            before_sleep=before_sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._attempt(operation, endpoint, params, category, state)
        except DomainError as error:
            log_stage(
                logger,
                Stage.RETRY,
                "Request failed",
                level="error",
                endpoint=endpoint,
                attempts=state.attempt,
                kind=error.kind.value,
                sub_kind=error.sub_kind,
                retryable=error.retryable,
                reason=state.last_decision.reason if state.last_decision else "not_retryable",
            )
            raise
        return result

    async def _attempt(
        self,
        operation: Callable[[], Awaitable[T]],
        endpoint: str,
        params: dict[str, Any],
        category: RateCategory,
        state: RetryState,
    ) -> T:
        state.attempt += 1

        # Ticket taken inside the slot: window timestamps are call start times.
        async with self._admission.in_flight(category):
            await self._admission.admit(category)
            ctx = AttemptContext(
                endpoint=endpoint,
                params=redact_mapping(params),
                category=category.value,
                attempt=state.attempt,
                started_at=self._clock.now(),
                request_id=get_request_id(),
            )
            await self._middleware.before_call(ctx)
            try:
                result = await operation()
            except TransportFailure as failure:
                error = self._classifier.classify_failure(
                    failure, endpoint, params, attempt=state.attempt
                )
                state.last_error = error
                state.errors.append(error)
                await self._middleware.after_failure(ctx, error, self._clock.now() - ctx.started_at)
                raise error from failure
            except DomainError as error:
                state.last_error = error
                state.errors.append(error)
                await self._middleware.after_failure(ctx, error, self._clock.now() - ctx.started_at)
                raise

            await self._middleware.after_success(ctx, result, self._clock.now() - ctx.started_at)
            return result
