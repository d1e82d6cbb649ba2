"""
Clock Protocol

The admission queue, the cache and the retry controller read time and sleep
only through a Clock, so tests can drive them with virtual time.

Author: System Architect
Date: 2026-09-28
"""

import asyncio
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """
    Monotonic time source plus an awaitable sleep.

    Implementations:
    - SystemClock: time.monotonic() and asyncio.sleep()
    - FakeClock (tests): virtual time advanced by sleep()
    """

    def now(self) -> float:
        """Current time in seconds. Only differences are meaningful."""
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Wall-independent clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))
