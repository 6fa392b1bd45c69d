from __future__ import annotations

"""Application context: collaborators built once at start-up and passed down."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..game.scheduler import Scheduler, ThreadScheduler
from ..storage.questions import FileQuestionSource, QuestionSource
from ..storage.session_store import FileSessionStore, MemorySessionStore, SessionStore
from .explain import Tracer


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AnimationSettings:
    duration_ms: int = 1000
    settle_delay_ms: int = 1000
    reveal_delay_ms: int = 1000
    frame_ms: int = 16


@dataclass
class AppContext:
    store: SessionStore
    questions: QuestionSource
    scheduler: Scheduler
    tracer: Tracer = field(default_factory=Tracer)
    time_zone: str = "UTC"
    questions_per_day: int = 5
    animation: AnimationSettings = field(default_factory=AnimationSettings)
    history_dir: Optional[Path] = None
    now: Callable[[], datetime] = _utcnow


def build_context(cfg: Dict[str, Any], *, tracer: Optional[Tracer] = None) -> AppContext:
    """Wire production collaborators from a validated config."""
    tracer = tracer or Tracer()
    anim_cfg = cfg["animation"]
    animation = AnimationSettings(
        duration_ms=int(anim_cfg["duration_ms"]),
        settle_delay_ms=int(anim_cfg["settle_delay_ms"]),
        reveal_delay_ms=int(anim_cfg["reveal_delay_ms"]),
        frame_ms=int(anim_cfg["frame_ms"]),
    )

    store_cfg = cfg["store"]
    store: SessionStore
    if store_cfg["backend"] == "memory":
        store = MemorySessionStore()
    else:
        store = FileSessionStore(
            store_cfg["path"],
            prefix=store_cfg["prefix"],
            retention_days=int(store_cfg["retention_days"]),
            tracer=tracer,
        )

    history_cfg = cfg["history"]
    history_dir = Path(history_cfg["path"]) if history_cfg.get("enabled") else None

    return AppContext(
        store=store,
        questions=FileQuestionSource(cfg["questions"]["path"]),
        scheduler=ThreadScheduler(frame_ms=animation.frame_ms),
        tracer=tracer,
        time_zone=str(cfg["game"]["timezone"]),
        questions_per_day=int(cfg["game"]["questions_per_day"]),
        animation=animation,
        history_dir=history_dir,
    )
