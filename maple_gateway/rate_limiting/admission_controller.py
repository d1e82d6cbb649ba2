"""
Admission Controller

Routes each endpoint to the admission queue of its rate-limit category.
Categories are independent queue/limit pairs, so a backlog of heavy
(ranking) calls never delays default calls and vice versa.
"""

from collections.abc import Iterable
from contextlib import AbstractAsyncContextManager

from maple_gateway.core.config.constants import RateCategory
from maple_gateway.core.config.settings import Settings
from maple_gateway.core.interfaces import Clock, SystemClock
from maple_gateway.core.logging import get_logger
from maple_gateway.rate_limiting.admission_queue import AdmissionQueue, RatePolicy

logger = get_logger(__name__)


class AdmissionController:
    """
    Per-category admission queues.

    Usage:
        controller = AdmissionController.from_settings(settings)

        category = controller.category_for("ranking.overall")  # RateCategory.HEAVY
        async with controller.in_flight(category):
            await controller.admit(category)
            ...
    """

    def __init__(
        self,
        default_policy: RatePolicy,
        heavy_policy: RatePolicy,
        heavy_markers: Iterable[str] = ("ranking",),
        clock: Clock | None = None,
        queue_timeout: float | None = None,
    ):
        clock = clock or SystemClock()
        self._heavy_markers = tuple(marker.lower() for marker in heavy_markers)
        self._queues: dict[RateCategory, AdmissionQueue] = {
            RateCategory.DEFAULT: AdmissionQueue(default_policy, clock, queue_timeout),
            RateCategory.HEAVY: AdmissionQueue(heavy_policy, clock, queue_timeout),
        }

        logger.info(
            "Admission controller initialized",
            default_rps=default_policy.requests_per_second,
            heavy_rps=heavy_policy.requests_per_second,
            heavy_markers=list(self._heavy_markers),
            queue_timeout_seconds=queue_timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> "AdmissionController":
        rate = settings.rate_limit
        default_policy = RatePolicy(
            name=RateCategory.DEFAULT.value,
            requests_per_second=rate.RATE_LIMIT_REQUESTS_PER_SECOND,
            requests_per_minute=rate.RATE_LIMIT_REQUESTS_PER_MINUTE,
            burst_limit=rate.RATE_LIMIT_BURST,
        )
        heavy_policy = RatePolicy(
            name=RateCategory.HEAVY.value,
            requests_per_second=rate.RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND,
            requests_per_minute=rate.RATE_LIMIT_REQUESTS_PER_MINUTE,
            burst_limit=rate.RATE_LIMIT_HEAVY_BURST,
        )
        return cls(
            default_policy,
            heavy_policy,
            heavy_markers=rate.RATE_LIMIT_HEAVY_MARKERS,
            clock=clock,
            queue_timeout=settings.queue_timeout_seconds,
        )

    def category_for(self, endpoint: str) -> RateCategory:
        """Heavy if the endpoint identifier or path contains a heavy marker."""
        lowered = endpoint.lower()
        if any(marker in lowered for marker in self._heavy_markers):
            return RateCategory.HEAVY
        return RateCategory.DEFAULT

    def queue_for(self, category: RateCategory) -> AdmissionQueue:
        return self._queues[category]

    async def admit(self, category: RateCategory) -> float:
        return await self._queues[category].admit()

    def in_flight(self, category: RateCategory) -> AbstractAsyncContextManager[None]:
        return self._queues[category].in_flight()

    def stats(self) -> dict[str, dict]:
        return {category.value: queue.stats() for category, queue in self._queues.items()}
