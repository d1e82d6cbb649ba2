"""
Admission Queue

Throttles how fast outbound calls of one rate-limit category are released.

Features:
- FIFO admission tickets, one future per waiting caller
- Rolling 1 s and 60 s windows of admission timestamps
- At most one drain loop per queue, started on demand and stopped when idle
- Burst ceiling: a semaphore bounding calls in flight; callers take a slot
  before their ticket so an admission is always followed by a call start
- Optional queue timeout failing long waiters with ServiceUnavailable

Algorithm (drain loop):
1. Drop settled tickets (cancelled callers) from the head of the queue
2. Fail every ticket that waited longer than the queue timeout
3. Evict window timestamps older than the window length
4. If both windows have room, pop the head ticket and resolve it
5. Otherwise sleep exactly until the oldest timestamp leaves its window
   (or the head ticket's deadline, whichever is sooner) and repeat
6. Clear the active flag once the queue is empty

Architectural Decision: precise wake-up instead of fixed-interval polling
- A throttled ticket is released as soon as its slot opens, not up to one
  polling interval later
- With a virtual clock the loop is fully deterministic

Author: System Architect
Date: 2026-09-28
"""

import asyncio
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from maple_gateway.core.config.constants import (
    RATE_MINUTE_WINDOW_SECONDS,
    RATE_WINDOW_SECONDS,
    Stage,
)
from maple_gateway.core.exceptions import ServiceUnavailableError, UnavailableReason
from maple_gateway.core.interfaces import Clock, SystemClock
from maple_gateway.core.logging import get_logger, log_stage

logger = get_logger(__name__)

# Float slack when comparing a timestamp against a window edge
_EPSILON = 1e-9


@dataclass(frozen=True)
class RatePolicy:
    """
    Limits for one rate-limit category.

    Attributes:
        name: Category name (used in logs and stats)
        requests_per_second: Admissions allowed in any rolling 1 s window
        requests_per_minute: Admissions allowed in any rolling 60 s window (None = unlimited)
        burst_limit: Admitted calls allowed in flight at once (None = unlimited)
    """

    name: str
    requests_per_second: int
    requests_per_minute: int | None = None
    burst_limit: int | None = None

    def __post_init__(self):
        if self.requests_per_second < 1:
            raise ValueError("requests_per_second must be >= 1")
        if self.requests_per_minute is not None and self.requests_per_minute < 1:
            raise ValueError("requests_per_minute must be >= 1")
        if self.burst_limit is not None and self.burst_limit < 1:
            raise ValueError("burst_limit must be >= 1")


@dataclass
class Ticket:
    """A pending request for permission to perform one outbound call."""

    requested_at: float
    future: asyncio.Future = field(repr=False)


class AdmissionQueue:
    """
    FIFO admission queue for a single rate-limit category.

    Usage:
        queue = AdmissionQueue(RatePolicy("default", 8, 500, 12))

        async with queue.in_flight():
            await queue.admit()
            response = await transport.perform_call(endpoint, params)
    """

    def __init__(
        self,
        policy: RatePolicy,
        clock: Clock | None = None,
        queue_timeout: float | None = None,
    ):
        self.policy = policy
        self._clock = clock or SystemClock()
        self._queue_timeout = queue_timeout if queue_timeout else None

        self._pending: deque[Ticket] = deque()
        self._second_window: deque[float] = deque()
        self._minute_window: deque[float] = deque()
        self._draining = False
        self._drain_task: asyncio.Task | None = None
        self._in_flight_slots = (
            asyncio.Semaphore(policy.burst_limit) if policy.burst_limit else None
        )
        self._in_flight = 0

        self._admitted_total = 0
        self._timed_out_total = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def draining(self) -> bool:
        return self._draining

    async def admit(self) -> float:
        """
        Enqueue a ticket and wait until it is released.

        STAGE-2.1: Admission

        Returns:
            float: Clock time at which the ticket was admitted

        Raises:
            ServiceUnavailableError: {queue_timeout} if the ticket waited longer
                than the configured queue timeout
        """
        loop = asyncio.get_running_loop()
        ticket = Ticket(requested_at=self._clock.now(), future=loop.create_future())
        self._pending.append(ticket)
        self._ensure_draining()
        return await ticket.future

    @asynccontextmanager
    async def in_flight(self) -> AsyncIterator[None]:
        """Hold one burst slot for the duration of an admitted call."""
        if self._in_flight_slots is None:
            self._in_flight += 1
            try:
                yield
            finally:
                self._in_flight -= 1
            return

        async with self._in_flight_slots:
            self._in_flight += 1
            try:
                yield
            finally:
                self._in_flight -= 1

    def _ensure_draining(self) -> None:
        # No await between the check and the set, so two callers cannot both
        # start a loop.
        if self._draining:
            return
        self._draining = True
        self._drain_task = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while True:
                now = self._clock.now()
                self._discard_settled()
                self._expire_waiters(now)
                if not self._pending:
                    break

                self._evict(now)
                wait = self._next_slot_delay(now)
                if wait <= 0:
                    self._release(self._pending.popleft(), now)
                    continue

                if self._queue_timeout is not None:
                    head_deadline = self._pending[0].requested_at + self._queue_timeout
                    wait = min(wait, max(head_deadline - now, 0.0))

                log_stage(
                    logger,
                    Stage.ADMISSION,
                    "Admission throttled",
                    level="debug",
                    category=self.policy.name,
                    pending=len(self._pending),
                    wait_seconds=round(wait, 4),
                )
                await self._clock.sleep(wait)
        finally:
            self._draining = False

    def _discard_settled(self) -> None:
        while self._pending and self._pending[0].future.done():
            self._pending.popleft()

    def _expire_waiters(self, now: float) -> None:
        if self._queue_timeout is None:
            return
        while self._pending:
            ticket = self._pending[0]
            if ticket.future.done():
                self._pending.popleft()
                continue
            waited = now - ticket.requested_at
            if waited < self._queue_timeout - _EPSILON:
                break
            self._pending.popleft()
            self._timed_out_total += 1
            ticket.future.set_exception(
                ServiceUnavailableError(
                    UnavailableReason.QUEUE_TIMEOUT,
                    context={
                        "category": self.policy.name,
                        "waited_seconds": round(waited, 3),
                        "queue_timeout_seconds": self._queue_timeout,
                    },
                )
            )
            logger.warning(
                "Admission ticket timed out",
                stage=Stage.ADMISSION.value,
                category=self.policy.name,
                waited_seconds=round(waited, 3),
            )

    def _evict(self, now: float) -> None:
        while self._second_window and now - self._second_window[0] >= RATE_WINDOW_SECONDS - _EPSILON:
            self._second_window.popleft()
        while (
            self._minute_window
            and now - self._minute_window[0] >= RATE_MINUTE_WINDOW_SECONDS - _EPSILON
        ):
            self._minute_window.popleft()

    def _next_slot_delay(self, now: float) -> float:
        """Seconds until both windows have room (0 when a slot is open now)."""
        delay = 0.0
        if len(self._second_window) >= self.policy.requests_per_second:
            delay = max(delay, self._second_window[0] + RATE_WINDOW_SECONDS - now)
        rpm = self.policy.requests_per_minute
        if rpm is not None and len(self._minute_window) >= rpm:
            delay = max(delay, self._minute_window[0] + RATE_MINUTE_WINDOW_SECONDS - now)
        return delay

    def _release(self, ticket: Ticket, now: float) -> None:
        self._second_window.append(now)
        if self.policy.requests_per_minute is not None:
            self._minute_window.append(now)
        self._admitted_total += 1
        ticket.future.set_result(now)

    def stats(self) -> dict:
        """Snapshot of queue state for monitoring."""
        now = self._clock.now()
        return {
            "category": self.policy.name,
            "pending": len(self._pending),
            "in_flight": self._in_flight,
            "draining": self._draining,
            "admitted_total": self._admitted_total,
            "timed_out_total": self._timed_out_total,
            "window_1s": sum(1 for ts in self._second_window if now - ts < RATE_WINDOW_SECONDS),
            "requests_per_second": self.policy.requests_per_second,
            "requests_per_minute": self.policy.requests_per_minute,
            "burst_limit": self.policy.burst_limit,
        }
