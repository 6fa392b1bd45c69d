from __future__ import annotations

"""Schema constants and Pydantic models for persisted game data."""

import re
from datetime import datetime, timezone
from typing import List

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..game.scoring import MAX_POINTS

# --- Constants ---

DAY_KEY_RE = re.compile(r"^\d{4}_\d{2}_\d{2}$")

DTYPES = {
    "date": "string",
    # timezone-aware UTC timestamps
    "completed_at": pd.DatetimeTZDtype(tz="UTC"),
    "question_index": "UInt8",
    "food_name": "string",
    "calories": "UInt32",
    "points": "UInt16",
}


def _check_day_key(v: str) -> str:
    if not DAY_KEY_RE.match(v):
        raise ValueError(f"day key must look like YYYY_MM_DD, got {v!r}")
    return v


# --- Pydantic models ---

class Question(BaseModel):
    """One food item of a daily game."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    calories: int = Field(ge=0)
    image_url: str = Field(default="", alias="imageUrl")


class ScoreRecord(BaseModel):
    """Per-day persisted progress: one score per answered question, in order."""

    date: str
    scores: List[int] = Field(default_factory=list)
    completed: bool = False

    @field_validator("date")
    @classmethod
    def _date_key(cls, v: str) -> str:
        return _check_day_key(v)

    @field_validator("scores")
    @classmethod
    def _score_range(cls, v: List[int]) -> List[int]:
        for s in v:
            if not (0 <= int(s) <= MAX_POINTS):
                raise ValueError(f"score {s} outside 0..{MAX_POINTS}")
        return [int(s) for s in v]

    @model_validator(mode="after")
    def _completed_needs_scores(self) -> "ScoreRecord":
        if self.completed and not self.scores:
            raise ValueError("a completed record must hold scores")
        return self

    @property
    def total(self) -> int:
        return sum(self.scores)


class DayResultRow(BaseModel):
    date: str
    completed_at: datetime
    question_index: int = Field(ge=0, le=255)
    food_name: str
    calories: int = Field(ge=0, le=4294967295)
    points: int = Field(ge=0, le=MAX_POINTS)

    @field_validator("date")
    @classmethod
    def _date_key(cls, v: str) -> str:
        return _check_day_key(v)

    @field_validator("completed_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
