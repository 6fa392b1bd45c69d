from __future__ import annotations

"""Daily question sets.

Each day's game is a document `{"foods": [{name, calories, imageUrl}, ...]}`
keyed by its day key. Generating those documents is someone else's job;
this module only reads them.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from .schema import DAY_KEY_RE, Question


class QuestionSource(Protocol):
    def fetch_questions(self, day_key: str) -> Optional[List[Question]]: ...

    def list_days(self) -> List[str]: ...


def parse_document(doc: Dict) -> List[Question]:
    """Validate a day document. Raises ValueError/ValidationError on bad shape."""
    if not isinstance(doc, dict) or not isinstance(doc.get("foods"), list):
        raise ValueError("day document must hold a 'foods' list")
    return [Question.model_validate(item) for item in doc["foods"]]


class MemoryQuestionSource:
    def __init__(self, games: Dict[str, Sequence[Question | Dict]] | None = None) -> None:
        self._games: Dict[str, List[Question]] = {}
        for key, items in (games or {}).items():
            self.put(key, items)

    def put(self, day_key: str, items: Sequence[Question | Dict]) -> None:
        self._games[day_key] = [q if isinstance(q, Question) else Question.model_validate(q) for q in items]

    def fetch_questions(self, day_key: str) -> Optional[List[Question]]:
        items = self._games.get(day_key)
        return list(items) if items is not None else None

    def list_days(self) -> List[str]:
        return sorted(self._games, reverse=True)


class FileQuestionSource:
    """Reads `<directory>/<day_key>.json` documents."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def fetch_questions(self, day_key: str) -> Optional[List[Question]]:
        p = self.directory / f"{day_key}.json"
        if not p.exists():
            return None
        with p.open("r", encoding="utf-8") as f:
            doc = json.load(f)
        return parse_document(doc)

    def list_days(self) -> List[str]:
        """Day keys with a stored game, newest first."""
        if not self.directory.is_dir():
            return []
        keys = [p.stem for p in self.directory.glob("*.json") if DAY_KEY_RE.match(p.stem)]
        return sorted(keys, reverse=True)
