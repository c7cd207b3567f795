"""
Delayed callbacks with cancellation.

The engine's challenge window and the bots' thinking delay are scheduled
events rather than sleeps, so they can be cancelled when the game moves on.
VirtualScheduler runs them against a manual clock; AsyncioScheduler against
a running event loop.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledCall:
    """Cancellation token for one scheduled callback."""

    def __init__(self, when: float, callback: Callable[[], None], label: str = ""):
        self.when = when
        self.callback = callback
        self.label = label
        self.cancelled = False
        self.fired = False
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self):
        if not self.pending:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()

    def run(self):
        if not self.pending:
            return
        self.fired = True
        self.callback()


class Scheduler:
    """Interface shared by the schedulers."""

    def now(self) -> float:
        raise NotImplementedError

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        raise NotImplementedError


class VirtualScheduler(Scheduler):
    """Manual clock; nothing happens until the clock is advanced."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        call = ScheduledCall(self._now + max(0.0, delay), callback, label)
        heapq.heappush(self._queue, (call.when, next(self._counter), call))
        return call

    def pending_calls(self) -> List[ScheduledCall]:
        return [call for _, _, call in sorted(self._queue) if call.pending]

    def _pop_due(self, until: float) -> Optional[ScheduledCall]:
        while self._queue and self._queue[0][0] <= until:
            _, _, call = heapq.heappop(self._queue)
            if call.pending:
                return call
        return None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing everything that falls due. Returns calls fired."""
        target = self._now + seconds
        fired = 0
        call = self._pop_due(target)
        while call is not None:
            self._now = max(self._now, call.when)
            call.run()
            fired += 1
            call = self._pop_due(target)
        self._now = target
        return fired

    def run_next(self) -> bool:
        """Jump to the next pending call and fire it."""
        while self._queue:
            _, _, call = heapq.heappop(self._queue)
            if call.pending:
                self._now = max(self._now, call.when)
                call.run()
                return True
        return False

    def run_until_idle(self, max_steps: int = 10000) -> int:
        steps = 0
        while steps < max_steps and self.run_next():
            steps += 1
        if steps >= max_steps:
            logger.warning(f"Scheduler stopped after {max_steps} steps with calls still pending")
        return steps


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        call = ScheduledCall(self.now() + max(0.0, delay), callback, label)
        call._handle = self.loop.call_later(max(0.0, delay), call.run)
        return call
