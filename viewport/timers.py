"""
Cancelable one-shot timers and the debouncer built on them.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: The only suspension point besides the initial dataset
load is the viewport culling debounce. It is modeled as an injected Clock
so tests drive it by advancing virtual time instead of sleeping.

- Clock: protocol with call_later(delay_s, callback) -> TimerHandle
- AsyncioClock: production clock on the running asyncio event loop
- VirtualClock: deterministic clock, advance(seconds) fires due callbacks
- Debouncer: schedule/cancel/fire-once, rescheduled on every event

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Clock(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        ...


# ═══════════════════════════════════════════════════════════════════════════
# ⏱️ CLOCKS
# ═══════════════════════════════════════════════════════════════════════════


class AsyncioClock:
    """
    Clock backed by an asyncio event loop.

    Without an explicit loop, call_later() must run inside a running event
    loop. Synchronous callers pass a loop or use VirtualClock instead.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule callback on the loop.

        Raises:
            RuntimeError: If no loop was given and none is running
        """
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise RuntimeError(
                    "AsyncioClock needs a running event loop; "
                    "pass loop= or give the session an explicit clock"
                ) from e
        return loop.call_later(delay_s, callback)


class _VirtualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """
    Deterministic clock for tests.

    Callbacks fire in due-time order (ties in scheduling order) when
    advance() moves virtual time past their deadline.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, _VirtualHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _VirtualHandle()
        heapq.heappush(
            self._queue, (self.now + delay_s, next(self._seq), handle, callback)
        )
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move virtual time forward, firing due callbacks.

        Args:
            seconds: Amount of virtual time to advance

        Returns:
            Number of callbacks fired
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)


# ═══════════════════════════════════════════════════════════════════════════
# 🔁 DEBOUNCER
# ═══════════════════════════════════════════════════════════════════════════


class Debouncer:
    """
    Coalesce bursts of events into one callback delay_s after the last one.

    Each schedule() cancels the pending timer and arms a new one. close()
    disarms the timer for good; later schedule() calls are ignored.
    """

    def __init__(
        self, clock: Clock, delay_s: float, callback: Callable[[], None]
    ) -> None:
        self._clock = clock
        self._delay_s = delay_s
        self._callback = callback
        self._handle: Optional[TimerHandle] = None
        self._closed = False

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        if self._closed:
            logger.debug("Debouncer closed, ignoring schedule()")
            return
        self.cancel()
        self._handle = self._clock.call_later(self._delay_s, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        self.cancel()
        self._closed = True

    def _fire(self) -> None:
        self._handle = None
        self._callback()
