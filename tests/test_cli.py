import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from support import DAY, FOODS, GUESSES, make_context

from calorieguessr.app.cli import main, run_game
from calorieguessr.app.session_manager import GameSession, SessionPhase
from calorieguessr.storage.schema import ScoreRecord
from calorieguessr.storage.session_store import FileSessionStore


def _scripted_ui(inputs, ctx):
    answers = iter(inputs)
    printed = []
    ui = {
        "ask": lambda _prompt: next(answers),
        "inform": printed.append,
        "wait_for_animation": lambda _s: ctx.scheduler.run_until_idle(),
    }
    return ui, printed


class RunGameTests(unittest.TestCase):
    def test_plays_whole_day(self) -> None:
        ctx = make_context()
        session = GameSession(ctx)
        session.load()
        inputs = ["abc", GUESSES[0], ""]
        for g in GUESSES[1:-1]:
            inputs += [g, ""]
        inputs.append(GUESSES[-1])
        ui, printed = _scripted_ui(inputs, ctx)

        phase = run_game(session, ui)
        self.assertEqual(phase, SessionPhase.COMPLETED)
        text = "\n".join(printed)
        self.assertIn("Try again", text)
        self.assertIn("Final score: 2600/5000", text)
        self.assertIn("Question 5 / 5: Big Mac", text)

    def test_completed_day_shows_summary_only(self) -> None:
        ctx = make_context()
        ctx.store.save(ScoreRecord(date=DAY, scores=[1000, 500, 0, 800, 300], completed=True))
        session = GameSession(ctx)
        session.load()
        ui, printed = _scripted_ui([], ctx)
        run_game(session, ui)
        self.assertIn("You already played this game.", printed)
        self.assertEqual(ctx.store.saves, 1)


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.games = root / "daily_foods"
        self.games.mkdir()
        doc = {"foods": [q.model_dump(by_alias=True) for q in FOODS]}
        (self.games / f"{DAY}.json").write_text(json.dumps(doc), encoding="utf-8")
        (self.games / "2025_01_14.json").write_text(json.dumps(doc), encoding="utf-8")
        self.records = root / "records"
        self.cfg = root / "cfg.yml"
        self.cfg.write_text(
            "\n".join(
                [
                    "animation: {duration_ms: 1, settle_delay_ms: 0, reveal_delay_ms: 0, frame_ms: 1}",
                    f"store: {{backend: file, path: '{self.records}'}}",
                    f"questions: {{path: '{self.games}'}}",
                    f"history: {{enabled: true, path: '{root / 'history'}'}}",
                ]
            ),
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_list_days_with_status(self) -> None:
        FileSessionStore(self.records).save(ScoreRecord(date=DAY, scores=[1000, 500]))
        code, out, _ = self._run("list-days", "--config", str(self.cfg))
        self.assertEqual(code, 0)
        lines = out.strip().splitlines()
        self.assertEqual(lines[0], "2025-01-15  (in progress, 2 answered)")
        self.assertEqual(lines[1], "2025-01-14")

    def test_show_and_clear_records(self) -> None:
        code, out, _ = self._run("show-record", "--config", str(self.cfg), "--date", "2025-01-15")
        self.assertEqual(code, 1)
        FileSessionStore(self.records).save(ScoreRecord(date=DAY, scores=[7]))
        code, out, _ = self._run("show-record", "--config", str(self.cfg), "--date", "2025-01-15")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["scores"], [7])
        code, _, _ = self._run("clear-records", "--config", str(self.cfg))
        self.assertEqual(code, 0)
        self.assertIsNone(FileSessionStore(self.records).load(DAY))

    def test_play_missing_day(self) -> None:
        code, _, err = self._run("play", "--config", str(self.cfg), "--date", "2020-02-02")
        self.assertEqual(code, 1)
        self.assertIn("No questions available", err)

    def test_play_past_day_then_history(self) -> None:
        inputs = []
        for g in GUESSES[:-1]:
            inputs += [g, ""]
        inputs.append(GUESSES[-1])
        with mock.patch("builtins.input", side_effect=inputs):
            code, out, _ = self._run("play", "--config", str(self.cfg), "--date", "2025-01-14")
        self.assertEqual(code, 0)
        self.assertIn("Final score: 2600/5000", out)
        self.assertTrue(FileSessionStore(self.records).load("2025_01_14").completed)

        code, out, _ = self._run("history", "--config", str(self.cfg))
        self.assertEqual(code, 0)
        self.assertIn("2025-01-14: 2600", out)

    def test_bad_date_argument(self) -> None:
        with self.assertRaises(SystemExit):
            self._run("show-record", "--config", str(self.cfg), "--date", "someday")


if __name__ == "__main__":
    unittest.main()
