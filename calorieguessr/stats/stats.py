from __future__ import annotations

"""Human-readable summaries of a day's game and of the result history."""

from typing import Sequence

import pandas as pd

from ..game.clock import to_hyphenated
from ..game.scoring import MAX_POINTS, score_color
from ..storage.schema import Question


def format_summary(day_key: str, questions: Sequence[Question], scores: Sequence[int]) -> str:
    """Return the final-score text: total, then one line per answered question."""
    total = sum(int(s) for s in scores)
    lines = [
        f"Game {to_hyphenated(day_key)}",
        f"Final score: {total}/{MAX_POINTS * len(questions)}",
    ]
    for i, (q, pts) in enumerate(zip(questions, scores), start=1):
        r, g, b = score_color(pts)
        lines.append(f"{i}. {q.name}: {q.calories} kcal -> {pts} pts  rgb({r}, {g}, {b})")
    return "\n".join(lines)


def format_history(totals: pd.DataFrame) -> str:
    if totals.empty:
        return "No completed games yet."
    lines = []
    for row in totals.itertuples(index=False):
        lines.append(f"{to_hyphenated(str(row.date))}: {int(row.total)} ({int(row.questions)} questions, avg {row.mean:.0f})")
    return "\n".join(lines)
