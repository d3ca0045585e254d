# ================================================================================
# Cooperative Scheduler
# ================================================================================
#
# Single-threaded timer queue. Nothing runs in the background: due callbacks
# are dispatched whenever the calling code sleeps through Scheduler.sleep(),
# which is what every implicit wait does between polls. That is how the modal
# dialog observer keeps ticking while a test is blocked waiting for something.
#
# Key Features:
#   - call_later() one-shot timers with cancellable handles
#   - re-entrant dispatch (a callback may itself sleep and drive other timers)
#   - RepeatingTask with an idempotent stop()
#   - pluggable clock and delay primitive (host event loop, or a fake in tests)
#
# ================================================================================

from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, List, Optional, Tuple

from loguru import logger


def _blocking_delay(milliseconds: float) -> None:
    time.sleep(milliseconds / 1000.0)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TimerHandle:
    """Handle returned by Scheduler.call_later()."""

    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        self.cancelled = True


class Scheduler:
    """
    Cooperative timer queue.

    Args:
        delay: Host delay primitive taking milliseconds. It should let the
               host process its own events (e.g. Playwright's
               page.wait_for_timeout). Defaults to time.sleep.
        clock: Millisecond clock. Defaults to time.monotonic.

    Example:
        scheduler = Scheduler()
        scheduler.call_later(100, lambda: print("tick"))
        scheduler.sleep(150)   # prints "tick" after ~100ms
    """

    def __init__(
        self,
        delay: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._delay = delay or _blocking_delay
        self._clock = clock or _monotonic_ms
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        """Current time in milliseconds."""
        return self._clock()

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule a one-shot callback.

        Args:
            delay_ms: Delay in milliseconds
            callback: Callable without arguments

        Returns:
            TimerHandle that can cancel the callback
        """
        handle = TimerHandle(self.now() + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def run_due(self) -> int:
        """
        Run every timer whose due time has passed.

        Handles are popped before their callback runs, so a callback that
        sleeps (and therefore re-enters run_due) never sees itself again.

        Returns:
            Number of callbacks executed
        """
        executed = 0
        while self._queue:
            due, _, handle = self._queue[0]
            if handle.cancelled:
                heapq.heappop(self._queue)
                continue
            if due > self.now():
                break
            heapq.heappop(self._queue)
            handle.cancelled = True
            handle.callback()
            executed += 1
        return executed

    def _next_due(self) -> Optional[float]:
        for due, _, handle in sorted(self._queue):
            if not handle.cancelled:
                return due
        return None

    def sleep(self, milliseconds: float) -> None:
        """
        Block for the given time while dispatching due timers.

        Args:
            milliseconds: Time to sleep
        """
        end = self.now() + max(0.0, milliseconds)
        while True:
            self.run_due()
            now = self.now()
            remaining = end - now
            if remaining <= 0:
                return
            next_due = self._next_due()
            step = remaining if next_due is None else min(remaining, max(0.0, next_due - now))
            if step > 0:
                self._delay(step)


class RepeatingTask:
    """
    Calls `tick` every `interval_ms` until it returns True or stop() is called.

    The task re-arms a one-shot timer only after a tick has completed, so a
    tick that blocks (and lets the scheduler dispatch other timers) is never
    re-entered.

    Args:
        scheduler: Scheduler driving the task
        interval_ms: Delay between ticks
        tick: Callable returning True when the task is done
        name: Label used in log messages
    """

    def __init__(
        self,
        scheduler: Scheduler,
        interval_ms: float,
        tick: Callable[[], bool],
        name: str = "task",
    ):
        self._scheduler = scheduler
        self._interval = interval_ms
        self._tick = tick
        self._name = name
        self._handle: Optional[TimerHandle] = None
        self._active = False

    @property
    def active(self) -> bool:
        """True while the task is scheduled or running."""
        return self._active

    def start(self) -> "RepeatingTask":
        """Arm the first tick. Restarting an active task is a no-op."""
        if not self._active:
            self._active = True
            self._arm()
            logger.debug(f"Started repeating {self._name} every {self._interval}ms")
        return self

    def stop(self) -> None:
        """Cancel pending ticks. Always safe to call."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._active:
            self._active = False
            logger.debug(f"Stopped repeating {self._name}")

    def _arm(self) -> None:
        self._handle = self._scheduler.call_later(self._interval, self._run)

    def _run(self) -> None:
        self._handle = None
        if not self._active:
            return
        try:
            done = self._tick()
        except Exception:
            self.stop()
            raise
        if done:
            self.stop()
        elif self._active:
            self._arm()


__all__ = [
    "TimerHandle",
    "Scheduler",
    "RepeatingTask",
]
