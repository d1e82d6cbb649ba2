"""
Virtual Clock

Deterministic Clock implementation for admission, cache and retry tests.
"""

import asyncio
import heapq
import itertools

# Event-loop turns a sleeper yields before time jumps, so tasks that are
# already runnable act at the current virtual time first.
_YIELDS_BEFORE_ADVANCE = 3


class FakeClock:
    """
    Virtual time source.

    - now() returns virtual seconds
    - sleep(s) yields to other ready tasks, then moves time forward to
      (time at call + s) unless time is already past that point
    - every requested sleep is recorded in `sleeps`
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        deadline = self._now + max(0.0, seconds)
        for _ in range(_YIELDS_BEFORE_ADVANCE):
            await asyncio.sleep(0)
        self._now = max(self._now, deadline)


class SchedulingClock:
    """
    Virtual time source with independent sleepers.

    Each sleep(s) parks the caller until time reaches (time at call + s).
    Time only moves when the test calls `advance()`, which wakes sleepers in
    deadline order and lets the event loop settle after each wake-up, so
    overlapping sleeps (slow in-flight calls next to a throttled drain loop)
    resolve in the order real time would resolve them.
    """

    def __init__(self, start: float = 0.0, settle_turns: int = 50):
        self._now = start
        self._settle_turns = settle_turns
        self._sleepers: list[tuple[float, int, asyncio.Future]] = []
        self._seq = itertools.count()
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        wake = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + seconds, next(self._seq), wake))
        await wake

    async def settle(self) -> None:
        for _ in range(self._settle_turns):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        """Move time forward by `seconds`, waking every sleeper due on the way."""
        target = self._now + seconds
        await self.settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, wake = heapq.heappop(self._sleepers)
            self._now = max(self._now, deadline)
            if not wake.done():
                wake.set_result(None)
            await self.settle()
        self._now = target
