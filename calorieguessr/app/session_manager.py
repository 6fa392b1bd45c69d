from __future__ import annotations

"""Game session controller: question flow, scoring, persistence and resume.

One instance per page visit. It derives the day key once, loads the day's
questions and the stored score record, and then walks the player through
ASKING -> REVEALED for each question until the day is COMPLETED.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from ..errors import GameLoadError, GameNotFoundError, SessionStateError
from ..game.animation import ScoreAnimator
from ..game.clock import todays_key
from ..game.scoring import parse_guess, score_guess
from ..storage.schema import DayResultRow, Question, ScoreRecord
from ..storage.store import append_day_results, validate_records
from .context import AppContext
from .events import EventBus

EVENT_PHASE = "phase_changed"


class SessionPhase(str, Enum):
    LOADING = "loading"
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


class AnswerPhase(str, Enum):
    ASKING = "asking"
    REVEALED = "revealed"


# --- session start variants ---

@dataclass(frozen=True)
class FreshSession:
    record: ScoreRecord


@dataclass(frozen=True)
class ResumedSession:
    record: ScoreRecord
    index: int
    cumulative: int


@dataclass(frozen=True)
class CompletedSession:
    record: ScoreRecord


SessionStart = Union[FreshSession, ResumedSession, CompletedSession]


def resolve_session(day_key: str, record: Optional[ScoreRecord], total_questions: int) -> SessionStart:
    """Decide fresh / resumed / completed from the stored record.

    A record flagged completed stays completed even if it holds fewer than
    `total_questions` scores, so it is never written again.
    """
    if record is None or not record.scores:
        return FreshSession(ScoreRecord(date=day_key))
    answered = len(record.scores)
    if record.completed or answered >= total_questions:
        return CompletedSession(record)
    return ResumedSession(record, index=answered, cumulative=sum(record.scores))


@dataclass(frozen=True)
class GuessOutcome:
    index: int
    guess: int
    actual: int
    points: int
    completed: bool


@dataclass(frozen=True)
class SessionView:
    day_key: Optional[str]
    phase: SessionPhase
    answer_phase: AnswerPhase
    question_index: int
    total_questions: int
    current_question: Optional[Question]
    cumulative_score: int
    displayed_score: int
    pending_points_gained: Optional[int]
    answer_revealed: bool
    scores: Tuple[int, ...]
    show_final_score: bool


class GameSession:
    def __init__(self, ctx: AppContext, *, bus: Optional[EventBus] = None) -> None:
        self.ctx = ctx
        self.bus = bus or EventBus()
        anim = ctx.animation
        self.animator = ScoreAnimator(
            ctx.scheduler,
            duration_ms=anim.duration_ms,
            settle_delay_ms=anim.settle_delay_ms,
            reveal_delay_ms=anim.reveal_delay_ms,
            bus=self.bus,
            tracer=ctx.tracer,
        )
        self.phase = SessionPhase.LOADING
        self.answer_phase = AnswerPhase.ASKING
        self.day_key: Optional[str] = None
        self.questions: List[Question] = []
        self.scores: List[int] = []
        self.current_question_index = 0
        self.cumulative_score = 0
        self.show_final_score = False
        self.error: Optional[str] = None
        self.last_outcome: Optional[GuessOutcome] = None

    # --- loading ---

    def load(self, day_key: Optional[str] = None) -> SessionPhase:
        """Fetch the day's questions and stored record, then position the session.

        Raises:
            GameNotFoundError: no question set exists for the day.
            GameLoadError: fetching the questions failed.
        """
        key = day_key or todays_key(self.ctx.now(), self.ctx.time_zone)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="calorieguessr-load") as pool:
            fq = pool.submit(self.ctx.questions.fetch_questions, key)
            fr = pool.submit(self.ctx.store.load, key)
            try:
                questions = fq.result()
            except Exception as e:
                self._fail(f"Failed to load questions: {e}")
                raise GameLoadError(f"Failed to load questions for {key}: {e}") from e
            record = fr.result()

        if not questions:
            self._fail(f"No questions available for {key}")
            raise GameNotFoundError(key)

        if len(questions) != self.ctx.questions_per_day:
            self.ctx.tracer.trace(
                "question_count_mismatch",
                {"day": key, "found": len(questions), "expected": self.ctx.questions_per_day},
            )

        self.day_key = key
        self.questions = list(questions)
        self.error = None
        self.show_final_score = False
        self.last_outcome = None

        start = resolve_session(key, record, len(self.questions))
        match start:
            case FreshSession():
                self.scores = []
                self.current_question_index = 0
                self.cumulative_score = 0
                phase = SessionPhase.NOT_STARTED
            case ResumedSession(record=rec, index=index, cumulative=cumulative):
                self.scores = list(rec.scores)
                self.current_question_index = index
                self.cumulative_score = cumulative
                phase = SessionPhase.IN_PROGRESS
            case CompletedSession(record=rec):
                self.scores = list(rec.scores)
                self.current_question_index = len(self.questions) - 1
                self.cumulative_score = rec.total
                self.show_final_score = True
                phase = SessionPhase.COMPLETED
            case _:
                raise TypeError(f"unhandled session start {start!r}")

        self.answer_phase = AnswerPhase.ASKING
        self.animator.show(self.cumulative_score)
        self.ctx.tracer.trace(
            "session_loaded",
            {"day": key, "start": type(start).__name__, "answered": len(self.scores), "score": self.cumulative_score},
        )
        self._set_phase(phase)
        return phase

    # --- player actions ---

    def start_game(self) -> None:
        if self.phase in (SessionPhase.LOADING, SessionPhase.ERROR):
            raise SessionStateError(f"cannot start a game while {self.phase.value}")
        if self.phase == SessionPhase.NOT_STARTED:
            self.answer_phase = AnswerPhase.ASKING
            self._set_phase(SessionPhase.IN_PROGRESS)

    def submit_guess(self, guess_text: str) -> GuessOutcome:
        """Score a guess, persist the updated record and start the drain.

        Raises:
            InvalidGuessError: the text is not a whole number (nothing changes).
            SessionStateError: not waiting for a guess.
        """
        if self.phase != SessionPhase.IN_PROGRESS or self.answer_phase != AnswerPhase.ASKING:
            raise SessionStateError(f"not accepting guesses ({self.phase.value}/{self.answer_phase.value})")
        guess = parse_guess(guess_text)

        index = self.current_question_index
        actual = self.questions[index].calories
        points = score_guess(actual, guess)
        base = self.cumulative_score
        new_scores = self.scores + [points]
        completed = len(new_scores) >= len(self.questions)

        record = ScoreRecord(date=self.day_key, scores=new_scores, completed=completed)
        self.ctx.store.save(record)
        self.ctx.tracer.trace("record_saved", {"day": self.day_key, "scores": new_scores, "completed": completed})

        self.scores = new_scores
        self.cumulative_score = base + points
        self.answer_phase = AnswerPhase.REVEALED
        outcome = GuessOutcome(index=index, guess=guess, actual=actual, points=points, completed=completed)
        self.last_outcome = outcome
        self.ctx.tracer.trace("guess_scored", {"index": index, "guess": guess, "actual": actual, "points": points})

        self.animator.start(points, base)
        return outcome

    @property
    def can_advance(self) -> bool:
        return (
            self.phase == SessionPhase.IN_PROGRESS
            and self.answer_phase == AnswerPhase.REVEALED
            and not self.animator.is_draining
        )

    def advance_to_next(self) -> SessionPhase:
        """Move past a revealed answer. Only allowed once the drain has settled."""
        if self.phase != SessionPhase.IN_PROGRESS or self.answer_phase != AnswerPhase.REVEALED:
            raise SessionStateError("no revealed answer to move past")
        if self.animator.is_draining:
            raise SessionStateError("score animation still running")

        self.animator.reset()
        self.animator.show(self.cumulative_score)
        self.answer_phase = AnswerPhase.ASKING

        if self.current_question_index < len(self.questions) - 1:
            self.current_question_index += 1
            self.ctx.tracer.trace("next_question", {"index": self.current_question_index})
            return self.phase

        self.show_final_score = True
        self.ctx.tracer.trace("session_completed", {"day": self.day_key, "score": self.cumulative_score})
        self._set_phase(SessionPhase.COMPLETED)
        self._record_history()
        return self.phase

    def close(self) -> None:
        """Navigation away: drop any in-flight animation callbacks."""
        self.animator.cancel()

    # --- observables ---

    @property
    def game_started(self) -> bool:
        return self.phase == SessionPhase.IN_PROGRESS

    @property
    def answer_revealed(self) -> bool:
        return self.answer_phase == AnswerPhase.REVEALED

    @property
    def current_question(self) -> Optional[Question]:
        if self.phase != SessionPhase.IN_PROGRESS:
            return None
        return self.questions[self.current_question_index]

    @property
    def displayed_score(self) -> int:
        return self.animator.displayed_score

    @property
    def pending_points_gained(self) -> Optional[int]:
        return self.animator.pending_points

    def view(self) -> SessionView:
        frame = self.animator.frame()
        return SessionView(
            day_key=self.day_key,
            phase=self.phase,
            answer_phase=self.answer_phase,
            question_index=self.current_question_index,
            total_questions=len(self.questions),
            current_question=self.current_question,
            cumulative_score=self.cumulative_score,
            displayed_score=frame.displayed_score,
            pending_points_gained=frame.pending_points,
            answer_revealed=self.answer_revealed,
            scores=tuple(self.scores),
            show_final_score=self.show_final_score,
        )

    # --- internals ---

    def _set_phase(self, phase: SessionPhase) -> None:
        self.phase = phase
        self.bus.emit(EVENT_PHASE, phase)

    def _fail(self, message: str) -> None:
        self.error = message
        self.ctx.tracer.trace("session_error", {"error": message})
        self._set_phase(SessionPhase.ERROR)

    def _record_history(self) -> None:
        if self.ctx.history_dir is None:
            return
        done_at = self.ctx.now()
        rows = [
            DayResultRow(
                date=self.day_key,
                completed_at=done_at,
                question_index=i,
                food_name=q.name,
                calories=q.calories,
                points=p,
            )
            for i, (q, p) in enumerate(zip(self.questions, self.scores))
        ]
        try:
            append_day_results(validate_records(rows), self.ctx.history_dir)
        except (OSError, ValueError) as e:
            # history is a convenience; the day's record is already saved
            print(f"WARNING: could not write result history: {e}")
