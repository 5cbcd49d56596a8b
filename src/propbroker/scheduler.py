"""
Host timer primitives: "run this callback after approximately N seconds".

The readiness engine never keeps time itself; it asks a Scheduler to call it
back after its poll interval and re-arms on every fire. Three hosts are
provided:

- ThreadScheduler: one daemon worker thread, for plain synchronous processes
- AsyncioScheduler: delegates to an asyncio event loop's call_later()
- ManualScheduler: virtual clock advanced explicitly, for deterministic tests
"""

import asyncio
import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a zero-argument callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class TimerHandle:
    """Handle for one scheduled callback."""

    __slots__ = ('when', 'callback', '_cancelled')

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "armed"
        return f"TimerHandle(when={self.when:.6f}, {state})"


_HeapEntry = Tuple[float, int, TimerHandle]


class ThreadScheduler:
    """Runs timers on a single lazily started daemon thread.

    Callbacks execute on the worker thread, one at a time, in due order.
    Exceptions raised by a callback are logged and do not stop the worker.
    """

    def __init__(self, name: str = "propbroker-timer"):
        self._name = name
        self._queue: List[_HeapEntry] = []
        self._sequence = itertools.count()
        self._condition = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._shutdown = False

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(time.monotonic() + max(delay, 0.0), callback)
        with self._condition:
            if self._shutdown:
                raise RuntimeError(f"{self._name} has been shut down")
            heapq.heappush(self._queue, (handle.when, next(self._sequence), handle))
            self._ensure_worker()
            self._condition.notify()
        return handle

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker. Timers still queued are dropped."""
        with self._condition:
            self._shutdown = True
            self._queue.clear()
            self._condition.notify_all()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()
        logger.debug(f"{self._name} shut down")

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _ensure_worker(self) -> None:
        # Caller holds self._condition
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
            logger.debug(f"Started timer thread {self._name}")

    def _next_due(self) -> Optional[TimerHandle]:
        """Block until a timer is due; None once shut down."""
        with self._condition:
            while not self._shutdown:
                if not self._queue:
                    self._condition.wait()
                    continue
                when = self._queue[0][0]
                remaining = when - time.monotonic()
                if remaining <= 0:
                    return heapq.heappop(self._queue)[2]
                self._condition.wait(remaining)
            return None

    def _run(self) -> None:
        while True:
            handle = self._next_due()
            if handle is None:
                return
            if handle.cancelled:
                continue
            try:
                handle.callback()
            except Exception as e:
                logger.warning(f"Timer callback failed on {self._name}: {e}")


class AsyncioScheduler:
    """Schedules timers on an asyncio event loop.

    Must be used from the loop's own thread. When no loop is given, the
    running loop at call time is used.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualScheduler:
    """Virtual-clock scheduler. Nothing runs until advance() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: List[_HeapEntry] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.when, next(self._sequence), handle))
        return handle

    def advance(self, seconds: float = 0.0) -> int:
        """Move the clock forward, running every timer that falls due.

        Timers armed by callbacks during the advance also run if they fall
        due before the target time.

        Returns:
            Number of callbacks executed.
        """
        target = self.now + seconds
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if handle.cancelled:
                continue
            handle.callback()
            executed += 1
        self.now = target
        return executed

    @property
    def pending(self) -> int:
        """Number of armed (not cancelled) timers."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)
