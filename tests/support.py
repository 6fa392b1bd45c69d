"""Shared fixtures for the test-suite: deterministic context and a sample day."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from calorieguessr.app.context import AnimationSettings, AppContext
from calorieguessr.game.scheduler import ManualScheduler
from calorieguessr.storage.questions import MemoryQuestionSource
from calorieguessr.storage.schema import Question
from calorieguessr.storage.session_store import MemorySessionStore

DAY = "2025_01_15"
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

FOODS = [
    Question(name="Whopper", calories=670, image_url="https://img.example/whopper.png"),
    Question(name="Whopper Jr.", calories=670),
    Question(name="Medium Fries", calories=300),
    Question(name="Crunchwrap Supreme", calories=400),
    Question(name="Big Mac", calories=500),
]

# guesses producing points [1000, 500, 0, 800, 300]
GUESSES = ["670", "170", "5000", "600", "1200"]
POINTS = [1000, 500, 0, 800, 300]


def make_context(
    *,
    store: Optional[MemorySessionStore] = None,
    questions: Optional[MemoryQuestionSource] = None,
    history_dir: Optional[Path] = None,
    reveal_delay_ms: int = 0,
) -> AppContext:
    return AppContext(
        store=store if store is not None else MemorySessionStore(),
        questions=questions if questions is not None else MemoryQuestionSource({DAY: FOODS}),
        scheduler=ManualScheduler(frame_ms=16),
        time_zone="UTC",
        questions_per_day=5,
        animation=AnimationSettings(duration_ms=1000, settle_delay_ms=1000, reveal_delay_ms=reveal_delay_ms, frame_ms=16),
        history_dir=history_dir,
        now=lambda: NOW,
    )
