from __future__ import annotations

"""Error types raised by the game core."""


class CalorieGuessrError(Exception):
    """Base class for all game errors."""


class GameNotFoundError(CalorieGuessrError):
    """No question set exists for the requested day."""

    def __init__(self, day_key: str) -> None:
        super().__init__(f"No questions available for {day_key}")
        self.day_key = day_key


class GameLoadError(CalorieGuessrError):
    """Loading the day's questions failed for an unexpected reason."""


class InvalidGuessError(CalorieGuessrError, ValueError):
    """The guess text is not a whole number."""


class SessionStateError(CalorieGuessrError):
    """An operation was called in a phase that does not allow it."""
