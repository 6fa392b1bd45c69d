from __future__ import annotations

"""Cancellable timer/task abstraction used by the score animation.

Two schedulers share one protocol:

- ThreadScheduler: wall clock; frame ticks on a daemon thread, delays via
  threading.Timer.
- ManualScheduler: virtual clock advanced explicitly (tests, replays).
"""

import heapq
import itertools
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

TickFn = Callable[[float], None]


class TaskHandle:
    """Handle returned for every scheduled task or delayed call."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None) -> None:
        self._cancelled = False
        self._on_cancel = on_cancel

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()


class Scheduler(Protocol):
    frame_ms: int

    def now_ms(self) -> float: ...

    def start_task(self, tick_fn: TickFn, duration_ms: int) -> TaskHandle: ...

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> TaskHandle: ...


class ThreadScheduler:
    def __init__(self, frame_ms: int = 16) -> None:
        self.frame_ms = int(frame_ms)

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def start_task(self, tick_fn: TickFn, duration_ms: int) -> TaskHandle:
        """Call `tick_fn(elapsed_ms)` every frame until `duration_ms` has elapsed.

        The final call always receives `elapsed_ms >= duration_ms`.
        """
        stop = threading.Event()
        handle = TaskHandle(stop.set)
        start = self.now_ms()

        def _run() -> None:
            while not stop.wait(self.frame_ms / 1000.0):
                elapsed = self.now_ms() - start
                tick_fn(elapsed)
                if elapsed >= duration_ms:
                    return

        t = threading.Thread(target=_run, name="calorieguessr-tick", daemon=True)
        t.start()
        return handle

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> TaskHandle:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, fn)
        timer.daemon = True
        handle = TaskHandle(timer.cancel)
        timer.start()
        return handle


class ManualScheduler:
    """Deterministic scheduler driven by `advance(ms)`.

    Frames fire every `frame_ms` of virtual time; delayed calls fire when the
    clock passes their due time. Entries with equal due time run in the order
    they were scheduled.
    """

    def __init__(self, frame_ms: int = 16) -> None:
        self.frame_ms = int(frame_ms)
        self._now = 0.0
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, TaskHandle, Callable[[], None]]] = []

    def now_ms(self) -> float:
        return self._now

    def _push(self, due: float, handle: TaskHandle, fn: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle, fn))

    def start_task(self, tick_fn: TickFn, duration_ms: int) -> TaskHandle:
        handle = TaskHandle()
        start = self._now

        def _frame() -> None:
            elapsed = self._now - start
            tick_fn(elapsed)
            if elapsed < duration_ms and not handle.cancelled:
                self._push(self._now + self.frame_ms, handle, _frame)

        self._push(self._now + self.frame_ms, handle, _frame)
        return handle

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle()
        self._push(self._now + max(0, delay_ms), handle, fn)
        return handle

    def advance(self, ms: float) -> None:
        target = self._now + float(ms)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if handle.cancelled:
                continue
            fn()
        self._now = target

    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    def run_until_idle(self, limit_ms: float = 60_000) -> None:
        """Advance frame by frame until nothing is pending (or `limit_ms` passes)."""
        spent = 0.0
        while self.pending() and spent < limit_ms:
            self.advance(self.frame_ms)
            spent += self.frame_ms
