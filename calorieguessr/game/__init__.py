"""Pure game rules: day keys, scoring, and the score animation."""

from .clock import parse_key, to_hyphenated, to_underscore, todays_key  # noqa: F401
from .scoring import MAX_POINTS, parse_guess, score_color, score_guess  # noqa: F401
