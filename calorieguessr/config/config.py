from __future__ import annotations

"""Configuration loading and validation for CalorieGuessr.

This module loads YAML configuration, applies defaults, and validates
enumerations and numeric ranges for the CLI.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import sys

import yaml

from ..game.clock import is_valid_zone


ALLOWED_STORE_BACKENDS = {"file", "memory"}

_ANIMATION_DEFAULTS = {
    "duration_ms": 1000,
    "settle_delay_ms": 1000,
    "reveal_delay_ms": 1000,
    "frame_ms": 16,
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        default_path = Path(__file__).with_name("defaults.yml")
        cfg = _load_yaml(default_path)
    return cfg


def _int_at_least(section: Dict[str, Any], key: str, default: int, minimum: int) -> None:
    try:
        val = int(section.get(key, default))
    except (TypeError, ValueError):
        val = minimum - 1
    if val < minimum:
        print(f"WARNING: Invalid {key} '{section.get(key)}', using {default}.")
        val = default
    section[key] = val


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    for section in ("game", "animation", "store", "questions", "history"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    game = cfg["game"]
    anim = cfg["animation"]
    store = cfg["store"]
    questions = cfg["questions"]
    history = cfg["history"]

    # Apply section defaults
    game.setdefault("questions_per_day", 5)
    game.setdefault("timezone", "UTC")

    for key, default in _ANIMATION_DEFAULTS.items():
        anim.setdefault(key, default)

    store.setdefault("backend", "file")
    store.setdefault("path", "./.calorieguessr/records")
    store.setdefault("prefix", "scores")
    store.setdefault("retention_days", 1)

    questions.setdefault("path", "./daily_foods")

    history.setdefault("enabled", True)
    history.setdefault("path", "./.calorieguessr/history")

    # Enum validations
    backend = store.get("backend")
    if backend not in ALLOWED_STORE_BACKENDS:
        print(f"WARNING: Unsupported store backend '{backend}', using 'file'.")
        store["backend"] = "file"

    tz = str(game.get("timezone"))
    if not is_valid_zone(tz):
        print(f"WARNING: Unknown timezone '{tz}', using 'UTC'.")
        tz = "UTC"
    game["timezone"] = tz

    # Numeric ranges
    _int_at_least(game, "questions_per_day", 5, 1)
    _int_at_least(anim, "duration_ms", _ANIMATION_DEFAULTS["duration_ms"], 1)
    _int_at_least(anim, "frame_ms", _ANIMATION_DEFAULTS["frame_ms"], 1)
    _int_at_least(anim, "settle_delay_ms", _ANIMATION_DEFAULTS["settle_delay_ms"], 0)
    _int_at_least(anim, "reveal_delay_ms", _ANIMATION_DEFAULTS["reveal_delay_ms"], 0)
    _int_at_least(store, "retention_days", 1, 1)

    store["prefix"] = str(store.get("prefix") or "scores")
    history["enabled"] = bool(history.get("enabled"))

    return cfg
