from __future__ import annotations

"""CLI for CalorieGuessr using GameSession and the configured stores."""

import argparse
import json
import sys
import time
from typing import Any, Callable, Dict

from .. import __version__
from ..config.config import load_config, validate_config
from ..errors import GameLoadError, GameNotFoundError, InvalidGuessError
from ..game.clock import parse_key, to_hyphenated
from ..stats.stats import format_history, format_summary
from ..storage.store import daily_totals, load_all
from .context import AppContext, build_context
from .explain import Tracer
from .session_manager import GameSession, SessionPhase


def _wait_for_animation(session: GameSession, poll_s: float = 0.02) -> None:
    # "Next" becomes available once the drain settled and the indicator cleared
    while session.animator.is_draining or session.pending_points_gained is not None:
        time.sleep(poll_s)


def _build_ui() -> Dict[str, Callable[..., Any]]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform, "wait_for_animation": _wait_for_animation}


def run_game(session: GameSession, ui: Dict[str, Callable[..., Any]]) -> SessionPhase:
    """Drive a loaded session to completion through the given UI callbacks."""
    ask = ui["ask"]
    inform = ui["inform"]
    wait = ui.get("wait_for_animation", _wait_for_animation)

    if session.phase == SessionPhase.COMPLETED:
        inform("You already played this game.")
        inform(format_summary(session.day_key, session.questions, session.scores))
        return session.phase

    if session.phase == SessionPhase.IN_PROGRESS:
        inform(f"Resuming at question {session.current_question_index + 1} with score {session.cumulative_score}.")
    session.start_game()

    total = len(session.questions)
    while session.phase == SessionPhase.IN_PROGRESS:
        q = session.current_question
        inform(f"\nQuestion {session.current_question_index + 1} / {total}: {q.name}")
        if q.image_url:
            inform(f"  {q.image_url}")

        while True:
            try:
                outcome = session.submit_guess(ask("Your guess (calories): "))
            except InvalidGuessError as e:
                inform(f"{e}. Try again.")
                continue
            break

        inform(f"Your answer: {outcome.guess} | Correct answer: {outcome.actual} | +{outcome.points}")
        wait(session)
        inform(f"Score: {session.displayed_score}")
        if not outcome.completed:
            ask("Press Enter for the next question...")
        session.advance_to_next()

    inform("\nQuiz completed!")
    inform(format_summary(session.day_key, session.questions, session.scores))
    return session.phase


def _context(args: argparse.Namespace) -> AppContext:
    cfg = validate_config(load_config(args.config))
    tracer = Tracer(enabled=bool(getattr(args, "explain", False)))
    return build_context(cfg, tracer=tracer)


def _day_arg(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return parse_key(value)
    except ValueError as e:
        raise SystemExit(f"ERROR: {e}") from None


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="calorieguessr", description="Guess the calories of fast food.")
    p.add_argument("--version", action="version", version=f"calorieguessr {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("play", help="Play the daily game (or a past one with --date)")
    pp.add_argument("--config", default=None)
    pp.add_argument("--date", default=None, help="Day to play, YYYY-MM-DD")
    pp.add_argument("--explain", action="store_true")

    lp = sub.add_parser("list-days", help="List past games, newest first")
    lp.add_argument("--config", default=None)

    sp = sub.add_parser("show-record", help="Print the stored score record for a day")
    sp.add_argument("--config", default=None)
    sp.add_argument("--date", required=True)

    cp = sub.add_parser("clear-records", help="Delete every stored score record")
    cp.add_argument("--config", default=None)

    hp = sub.add_parser("history", help="Show totals of completed games")
    hp.add_argument("--config", default=None)

    args = p.parse_args(argv)

    if args.cmd == "play":
        day = _day_arg(args.date)
        ctx = _context(args)
        session = GameSession(ctx)
        try:
            session.load(day)
        except (GameNotFoundError, GameLoadError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        try:
            run_game(session, _build_ui())
        except (EOFError, KeyboardInterrupt):
            print("\nBye. Your progress for today is saved.")
            return 130
        finally:
            session.close()
        return 0

    if args.cmd == "list-days":
        ctx = _context(args)
        days = ctx.questions.list_days()
        if not days:
            print("No games found.")
        for day in days:
            rec = ctx.store.load(day)
            if rec is None:
                status = ""
            elif rec.completed:
                status = f"  (completed, {rec.total})"
            else:
                status = f"  (in progress, {len(rec.scores)} answered)"
            print(f"{to_hyphenated(day)}{status}")
        return 0

    if args.cmd == "show-record":
        day = _day_arg(args.date)
        ctx = _context(args)
        rec = ctx.store.load(day)
        if rec is None:
            print(f"No record for {to_hyphenated(day)}.")
            return 1
        print(json.dumps(rec.model_dump(), indent=2))
        return 0

    if args.cmd == "clear-records":
        ctx = _context(args)
        ctx.store.clear_all()
        print("Cleared all score records.")
        return 0

    if args.cmd == "history":
        ctx = _context(args)
        if ctx.history_dir is None:
            print("History is disabled in the configuration.")
            return 0
        print(format_history(daily_totals(load_all(ctx.history_dir))))
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
