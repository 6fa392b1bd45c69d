from __future__ import annotations

"""Scoring engine: guess -> points, plus the score colour ramp."""

import re
from typing import Tuple

from ..errors import InvalidGuessError

MAX_POINTS = 1000

_INT_RE = re.compile(r"[+-]?[0-9]+")

# Colour ramp endpoints (0 points -> grey, MAX_POINTS -> dark green)
_COLOR_LOW = (50, 50, 50)
_COLOR_HIGH = (0, 128, 0)


def score_guess(actual: int, guess: int) -> int:
    """Points for a guess: 1000 for an exact answer, minus one per calorie off, floored at 0."""
    return max(0, MAX_POINTS - abs(int(actual) - int(guess)))


def parse_guess(text: str) -> int:
    """Parse raw guess text into an integer.

    Raises:
        InvalidGuessError: if the text is empty or not a base-10 integer.
    """
    if text is None:
        raise InvalidGuessError("Guess is empty")
    s = str(text).strip()
    if not s:
        raise InvalidGuessError("Guess is empty")
    if not _INT_RE.fullmatch(s):
        raise InvalidGuessError(f"Guess must be a whole number, got {s!r}")
    try:
        return int(s)
    except ValueError as e:
        # too many digits for int()
        raise InvalidGuessError("Guess is too long") from e


def score_color(points: int) -> Tuple[int, int, int]:
    """Linear RGB interpolation between the low and high ramp colours."""
    p = min(max(int(points), 0), MAX_POINTS) / MAX_POINTS
    return tuple(int(lo + (hi - lo) * p) for lo, hi in zip(_COLOR_LOW, _COLOR_HIGH))  # type: ignore[return-value]
