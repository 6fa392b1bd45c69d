from __future__ import annotations

"""Score drain animation.

After a guess the points gained are shown as a pending value that drains
linearly to zero over `duration_ms` while the displayed score climbs by the
same amount. Phases: IDLE -> DRAINING -> SETTLED -> IDLE.

Only one cycle is live at a time. Every scheduled callback carries the
generation it was issued for; callbacks from an older generation are dropped.
The displayed score is a visual value only, the session controller keeps the
authoritative total.
"""

import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..app.events import EventBus
from ..app.explain import Tracer
from .scheduler import Scheduler, TaskHandle

DEFAULT_DURATION_MS = 1000
DEFAULT_SETTLE_DELAY_MS = 1000

EVENT_TICK = "score_tick"
EVENT_SETTLED = "drain_settled"
EVENT_CLEARED = "indicator_cleared"


class AnimationPhase(str, Enum):
    IDLE = "idle"
    DRAINING = "draining"
    SETTLED = "settled"


@dataclass(frozen=True)
class ScoreFrame:
    displayed_score: int
    pending_points: Optional[int]
    phase: AnimationPhase


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class ScoreAnimator:
    def __init__(
        self,
        scheduler: Scheduler,
        *,
        duration_ms: int = DEFAULT_DURATION_MS,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
        reveal_delay_ms: int = 0,
        bus: Optional[EventBus] = None,
        tracer: Optional[Tracer] = None,
    ) -> None:
        self.scheduler = scheduler
        self.duration_ms = int(duration_ms)
        self.settle_delay_ms = int(settle_delay_ms)
        self.reveal_delay_ms = int(reveal_delay_ms)
        self.bus = bus or EventBus()
        self.tracer = tracer or Tracer()

        self._lock = threading.RLock()
        self._generation = 0
        self._handle: Optional[TaskHandle] = None
        self._base = 0
        self._initial = 0
        self._phase = AnimationPhase.IDLE
        self._displayed = 0
        self._pending: Optional[int] = None

    # --- read side ---

    @property
    def phase(self) -> AnimationPhase:
        return self._phase

    @property
    def displayed_score(self) -> int:
        return self._displayed

    @property
    def pending_points(self) -> Optional[int]:
        return self._pending

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_draining(self) -> bool:
        return self._phase == AnimationPhase.DRAINING

    def frame(self) -> ScoreFrame:
        with self._lock:
            return ScoreFrame(self._displayed, self._pending, self._phase)

    def show(self, score: int) -> None:
        """Set the displayed score without animating (session load/resume)."""
        with self._lock:
            self._cancel_locked(flush=False)
            self._generation += 1
            self._phase = AnimationPhase.IDLE
            self._pending = None
            self._displayed = int(score)

    # --- transitions ---

    def start(self, initial_points: int, base_score: int) -> int:
        """Begin a drain of `initial_points` on top of `base_score`.

        Cancels any cycle still in flight first. Returns the new generation.
        """
        with self._lock:
            if self._cancel_locked(flush=True):
                self.tracer.trace("drain_cancelled", {"generation": self._generation, "reason": "superseded"})
            self._generation += 1
            gen = self._generation
            self._base = int(base_score)
            self._initial = int(initial_points)
            self._displayed = self._base

            if self._initial <= 0:
                # nothing to animate; applied instantly
                self._pending = None
                self._phase = AnimationPhase.SETTLED
                frame = ScoreFrame(self._displayed, None, self._phase)
                self.tracer.trace("drain_skipped", {"generation": gen, "score": self._displayed})
            else:
                self._pending = self._initial
                self._phase = AnimationPhase.DRAINING
                frame = None
                self.tracer.trace(
                    "drain_started", {"generation": gen, "points": self._initial, "base": self._base}
                )
                if self.reveal_delay_ms > 0:
                    self._handle = self.scheduler.call_later(self.reveal_delay_ms, lambda: self._begin_drain(gen))
                else:
                    self._begin_drain_locked(gen)
        if frame is not None:
            self.bus.emit(EVENT_SETTLED, frame)
        return gen

    def cancel(self) -> None:
        """Stop the current cycle (navigation away). Any in-flight drain is flushed."""
        with self._lock:
            if self._cancel_locked(flush=True):
                self.tracer.trace("drain_cancelled", {"generation": self._generation, "reason": "cancel"})
            self._generation += 1
            self._phase = AnimationPhase.IDLE
            self._pending = None

    def reset(self) -> None:
        """SETTLED -> IDLE when the next question begins or the session ends."""
        self.cancel()

    # --- internals ---

    def _stale(self, gen: int) -> bool:
        if gen != self._generation:
            self.tracer.trace("stale_callback", {"generation": gen, "current": self._generation})
            return True
        return False

    def _cancel_locked(self, *, flush: bool) -> bool:
        """Cancel the live handle. Returns True if a drain was interrupted."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        interrupted = self._phase == AnimationPhase.DRAINING
        if interrupted and flush:
            self._displayed = self._base + self._initial
        return interrupted

    def _begin_drain(self, gen: int) -> None:
        with self._lock:
            if self._stale(gen):
                return
            self._begin_drain_locked(gen)

    def _begin_drain_locked(self, gen: int) -> None:
        self._handle = self.scheduler.start_task(lambda elapsed: self._tick(gen, elapsed), self.duration_ms)

    def _tick(self, gen: int, elapsed_ms: float) -> None:
        with self._lock:
            if self._stale(gen) or self._phase != AnimationPhase.DRAINING:
                return
            t = 1.0 if self.duration_ms <= 0 else min(elapsed_ms / self.duration_ms, 1.0)
            if t >= 1.0:
                self._settle_locked(gen)
                frame = ScoreFrame(self._displayed, self._pending, self._phase)
                event = EVENT_SETTLED
            else:
                remaining = _round_half_up(self._initial * (1.0 - t))
                self._pending = remaining
                self._displayed = self._base + (self._initial - remaining)
                frame = ScoreFrame(self._displayed, self._pending, self._phase)
                event = EVENT_TICK
        self.bus.emit(event, frame)

    def _settle_locked(self, gen: int) -> None:
        # exact final value, no float drift
        self._displayed = self._base + self._initial
        self._pending = 0
        self._phase = AnimationPhase.SETTLED
        self.tracer.trace("drain_settled", {"generation": gen, "score": self._displayed})
        self._handle = self.scheduler.call_later(self.settle_delay_ms, lambda: self._clear_indicator(gen))

    def _clear_indicator(self, gen: int) -> None:
        with self._lock:
            if self._stale(gen):
                return
            self._pending = None
            self._handle = None
            frame = ScoreFrame(self._displayed, None, self._phase)
        self.bus.emit(EVENT_CLEARED, frame)
