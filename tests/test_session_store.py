import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from calorieguessr.storage.schema import ScoreRecord
from calorieguessr.storage.session_store import FileSessionStore, MemorySessionStore


class ScoreRecordTests(unittest.TestCase):
    def test_valid_record(self) -> None:
        rec = ScoreRecord(date="2025_01_15", scores=[1000, 0, 250])
        self.assertEqual(rec.total, 1250)
        self.assertFalse(rec.completed)

    def test_rejects_out_of_range_scores(self) -> None:
        with self.assertRaises(ValidationError):
            ScoreRecord(date="2025_01_15", scores=[1001])
        with self.assertRaises(ValidationError):
            ScoreRecord(date="2025_01_15", scores=[-1])

    def test_rejects_bad_key(self) -> None:
        with self.assertRaises(ValidationError):
            ScoreRecord(date="2025-1-5", scores=[])

    def test_completed_needs_scores(self) -> None:
        with self.assertRaises(ValidationError):
            ScoreRecord(date="2025_01_15", scores=[], completed=True)


class MemorySessionStoreTests(unittest.TestCase):
    def test_load_save_clear(self) -> None:
        store = MemorySessionStore()
        self.assertIsNone(store.load("2025_01_15"))
        store.save(ScoreRecord(date="2025_01_15", scores=[10]))
        store.save(ScoreRecord(date="2025_01_15", scores=[10, 20]))
        self.assertEqual(store.load("2025_01_15").scores, [10, 20])
        store.clear_all()
        self.assertIsNone(store.load("2025_01_15"))

    def test_returns_copies(self) -> None:
        store = MemorySessionStore()
        store.save(ScoreRecord(date="2025_01_15", scores=[10]))
        store.load("2025_01_15").scores.append(99)
        self.assertEqual(store.load("2025_01_15").scores, [10])


class FileSessionStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name) / "records"
        self.clock = [datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)]
        self.store = FileSessionStore(self.dir, prefix="scores", retention_days=1, now=lambda: self.clock[0])

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_then_load(self) -> None:
        rec = ScoreRecord(date="2025_01_15", scores=[1000, 500], completed=False)
        self.store.save(rec)
        self.assertTrue((self.dir / "scores_2025_01_15.json").exists())
        self.assertEqual(self.store.load("2025_01_15"), rec)
        self.assertIsNone(self.store.load("2025_01_14"))

    def test_overwrite(self) -> None:
        self.store.save(ScoreRecord(date="2025_01_15", scores=[1]))
        self.store.save(ScoreRecord(date="2025_01_15", scores=[1, 2]))
        self.assertEqual(self.store.load("2025_01_15").scores, [1, 2])
        self.assertEqual(self.store.keys(), ["2025_01_15"])

    def test_expires_after_retention(self) -> None:
        self.store.save(ScoreRecord(date="2025_01_15", scores=[1]))
        self.clock[0] += timedelta(hours=23)
        self.assertIsNotNone(self.store.load("2025_01_15"))
        self.clock[0] += timedelta(hours=2)
        self.assertIsNone(self.store.load("2025_01_15"))
        self.assertFalse((self.dir / "scores_2025_01_15.json").exists())

    def test_corrupt_payload_is_absent(self) -> None:
        self.dir.mkdir(parents=True)
        (self.dir / "scores_2025_01_15.json").write_text("{not json", encoding="utf-8")
        self.assertIsNone(self.store.load("2025_01_15"))

        expires = (self.clock[0] + timedelta(days=1)).isoformat()
        bad = {"value": {"date": "2025_01_15", "scores": [5000]}, "expires": expires}
        (self.dir / "scores_2025_01_15.json").write_text(json.dumps(bad), encoding="utf-8")
        self.assertIsNone(self.store.load("2025_01_15"))

        other_day = {"value": {"date": "2025_01_14", "scores": [5]}, "expires": expires}
        (self.dir / "scores_2025_01_15.json").write_text(json.dumps(other_day), encoding="utf-8")
        self.assertIsNone(self.store.load("2025_01_15"))

    def test_clear_all_keeps_other_prefixes(self) -> None:
        self.store.save(ScoreRecord(date="2025_01_14", scores=[1]))
        self.store.save(ScoreRecord(date="2025_01_15", scores=[2]))
        other = FileSessionStore(self.dir, prefix="legacy", now=lambda: self.clock[0])
        other.save(ScoreRecord(date="2025_01_15", scores=[3]))

        self.store.clear_all()
        self.assertEqual(self.store.keys(), [])
        self.assertEqual(other.load("2025_01_15").scores, [3])

    def test_clear_all_ignores_longer_prefix(self) -> None:
        self.store.save(ScoreRecord(date="2025_01_15", scores=[1]))
        v2 = FileSessionStore(self.dir, prefix="scores_v2", now=lambda: self.clock[0])
        v2.save(ScoreRecord(date="2025_01_15", scores=[2]))

        self.assertEqual(self.store.keys(), ["2025_01_15"])
        self.store.clear_all()
        self.assertEqual(self.store.keys(), [])
        self.assertEqual(v2.load("2025_01_15").scores, [2])
        self.assertEqual(v2.keys(), ["2025_01_15"])

    def test_unavailable_medium_degrades(self) -> None:
        blocker = Path(self._tmp.name) / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        store = FileSessionStore(blocker / "records", now=lambda: self.clock[0])
        store.save(ScoreRecord(date="2025_01_15", scores=[1]))
        self.assertIsNone(store.load("2025_01_15"))
        store.clear_all()


if __name__ == "__main__":
    unittest.main()
