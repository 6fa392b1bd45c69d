from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the CLI flag and emit terse, readable lines at milestones.
The switch lives on a Tracer instance owned by the application context.
"""

import json
import sys
from typing import Any, Dict, TextIO


class Tracer:
    def __init__(self, enabled: bool = False, stream: TextIO | None = None) -> None:
        self._enabled = bool(enabled)
        self._stream = stream

    def enable(self, flag: bool = True) -> None:
        self._enabled = bool(flag)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def trace(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        if not self._enabled:
            return
        out = self._stream or sys.stdout
        try:
            data = payload or {}
            # keep it short; one line JSON
            print(f"[EXPLAIN] {event} :: {json.dumps(data, separators=(',', ':'), default=str)}", file=out)
        except (TypeError, ValueError):
            print(f"[EXPLAIN] {event}", file=out)
