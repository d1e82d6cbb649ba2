"""
Backoff Policy

Pure delay computation for the retry controller:

    delay(kind, attempt) = base(kind) * backoff_factor ** (attempt - 1) + jitter

where base(kind) = base_delay * KIND_MULTIPLIERS[kind], jitter is drawn
uniformly from [0, jitter_factor * raw delay], and the result is capped at
max_delay. The random source is injected so delays are reproducible.
"""

import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from maple_gateway.core.config.settings import Settings
from maple_gateway.core.exceptions import ErrorKind

# Slower-recovering failures start from a longer base delay
KIND_MULTIPLIERS: Mapping[ErrorKind, float] = MappingProxyType({
    ErrorKind.RATE_LIMITED: 2.0,
    ErrorKind.QUOTA_EXCEEDED: 3.0,
    ErrorKind.SERVICE_UNAVAILABLE: 2.0,
    ErrorKind.GATEWAY_TIMEOUT: 1.5,
    ErrorKind.SERVER_ERROR: 1.0,
    ErrorKind.CONNECTION_FAILED: 1.0,
})


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Per-kind exponential backoff with bounded jitter.

    Attributes:
        base_delay: Base delay in seconds before the kind multiplier
        max_delay: Ceiling for any single delay, in seconds
        backoff_factor: Growth factor per attempt (>= 1)
        jitter_factor: Maximum jitter as a fraction of the raw delay
        kind_multipliers: ErrorKind -> base delay multiplier (1.0 when absent)
    """

    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    jitter_factor: float = 0.1
    kind_multipliers: Mapping[ErrorKind, float] = field(default_factory=lambda: KIND_MULTIPLIERS)

    def __post_init__(self):
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.backoff_factor < 1.0:
            raise ValueError("backoff_factor must be >= 1.0")
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError("jitter_factor must be within [0, 1]")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        return cls(
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
            backoff_factor=settings.RETRY_BACKOFF_FACTOR,
            jitter_factor=settings.RETRY_JITTER_FACTOR,
        )

    def base_for(self, kind: ErrorKind) -> float:
        return self.base_delay * self.kind_multipliers.get(kind, 1.0)

    def raw_delay(self, kind: ErrorKind, attempt: int) -> float:
        """Delay before jitter and cap. attempt is 1-based."""
        if attempt < 1:
            raise ValueError("attempt must be >= 1")
        return self.base_for(kind) * self.backoff_factor ** (attempt - 1)

    def bounds(self, kind: ErrorKind, attempt: int) -> tuple[float, float]:
        """Inclusive (low, high) range compute_delay() can return."""
        raw = self.raw_delay(kind, attempt)
        return min(raw, self.max_delay), min(raw * (1 + self.jitter_factor), self.max_delay)

    def compute_delay(
        self,
        kind: ErrorKind,
        attempt: int,
        rng: random.Random | None = None,
    ) -> float:
        """
        Delay in seconds before retrying after the given attempt failed.

        Example:
            >>> policy = BackoffPolicy(jitter_factor=0.0)
            >>> policy.compute_delay(ErrorKind.SERVER_ERROR, 3)
            4.0
        """
        raw = self.raw_delay(kind, attempt)
        jitter = (rng or random).random() * self.jitter_factor * raw
        return min(raw + jitter, self.max_delay)
