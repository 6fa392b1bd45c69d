from .schema import DTYPES, DayResultRow, Question, ScoreRecord
from .session_store import FileSessionStore, MemorySessionStore, SessionStore
from .questions import FileQuestionSource, MemoryQuestionSource, QuestionSource
from .store import (
    init_store,
    validate_records,
    append_day_results,
    load_all,
    daily_totals,
    export_ndjson,
)

__all__ = [
    "DTYPES",
    "DayResultRow",
    "Question",
    "ScoreRecord",
    "SessionStore",
    "MemorySessionStore",
    "FileSessionStore",
    "QuestionSource",
    "MemoryQuestionSource",
    "FileQuestionSource",
    "init_store",
    "validate_records",
    "append_day_results",
    "load_all",
    "daily_totals",
    "export_ndjson",
]
