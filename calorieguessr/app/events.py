from __future__ import annotations

"""Tiny pub/sub event bus for score and session updates."""

import sys
from typing import Any, Callable, Dict, List

Handler = Callable[[Any], None]


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = {}

    def subscribe(self, event: str, handler: Handler) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception as e:
                # One failing subscriber must not stop the others or the game
                print(f"WARNING: handler for '{event}' failed: {e!r}", file=sys.stderr)
