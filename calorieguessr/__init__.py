"""CalorieGuessr package initialization.

Exposes the package version and the error types shared by the game core, so
front ends can simply `import calorieguessr`.
"""

from __future__ import annotations

from .errors import (
    CalorieGuessrError,
    GameLoadError,
    GameNotFoundError,
    InvalidGuessError,
    SessionStateError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CalorieGuessrError",
    "GameLoadError",
    "GameNotFoundError",
    "InvalidGuessError",
    "SessionStateError",
]
