import datetime
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from osm_fixtures import RecordingLogger

from Function.decorators import log_execution_time, safe_run
from Function.log_cleanup import clean_old_logs
from Service.schemas import BoundingBox, SnapshotLoadRequest, SnapshotSaveRequest


class BoundingBoxTests(unittest.TestCase):
    def test_valid_box(self):
        bbox = BoundingBox(south=50.0, west=14.2, north=50.15, east=14.6)
        self.assertEqual(bbox.as_overpass(), "50.0,14.2,50.15,14.6")

    def test_inverted_box_is_rejected(self):
        with self.assertRaises(ValidationError):
            BoundingBox(south=50.2, west=14.2, north=50.1, east=14.6)
        with self.assertRaises(ValidationError):
            BoundingBox(south=50.0, west=14.6, north=50.1, east=14.2)

    def test_out_of_range_degrees_are_rejected(self):
        with self.assertRaises(ValidationError):
            BoundingBox(south=-91.0, west=0.0, north=0.0, east=1.0)


class SnapshotRequestTests(unittest.TestCase):
    def test_load_requires_existing_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing.json"
            with self.assertRaises(ValidationError):
                SnapshotLoadRequest(file_path=missing)

            wrong = Path(tmp) / "network.txt"
            wrong.write_text("{}", encoding="utf-8")
            with self.assertRaises(ValidationError):
                SnapshotLoadRequest(file_path=wrong)

            ok = Path(tmp) / "network.json"
            ok.write_text("{}", encoding="utf-8")
            self.assertEqual(SnapshotLoadRequest(file_path=ok).file_path, ok.resolve())

    def test_save_requires_json_extension(self):
        with self.assertRaises(ValidationError):
            SnapshotSaveRequest(output_path=Path("network.geojson.gz"))
        self.assertTrue(SnapshotSaveRequest(output_path=Path("out/network.json")).output_path.is_absolute())


class LogCleanupTests(unittest.TestCase):
    def test_old_logs_are_removed(self):
        logger = RecordingLogger()
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp)
            for name in ("Log_20260101.log", "Log_20260109.log", "Log_bad.log"):
                (log_dir / name).write_text("", encoding="utf-8")

            removed = clean_old_logs(log_dir, logger, retention_days=3, today=datetime.date(2026, 1, 10))

            self.assertEqual(removed, 1)
            self.assertEqual(
                sorted(p.name for p in log_dir.iterdir()),
                ["Log_20260109.log", "Log_bad.log"],
            )
        self.assertTrue(logger.messages("WARNING"))

    def test_missing_directory_is_not_an_error(self):
        self.assertEqual(clean_old_logs("/nonexistent/roadnet/logs", RecordingLogger()), 0)


class DecoratorTests(unittest.TestCase):
    class _Stage:
        def __init__(self, logger):
            self._logger = logger

        @safe_run
        @log_execution_time
        def run(self, fail=False):
            if fail:
                raise RuntimeError("boom")
            return 42

    def test_execution_time_is_logged(self):
        logger = RecordingLogger()
        self.assertEqual(self._Stage(logger).run(), 42)
        self.assertTrue(any("[완료]" in msg for msg in logger.messages("INFO")))

    def test_safe_run_logs_and_reraises(self):
        logger = RecordingLogger()
        with self.assertRaises(RuntimeError):
            self._Stage(logger).run(fail=True)
        self.assertTrue(any("RuntimeError" in msg for msg in logger.messages("ERROR")))


if __name__ == "__main__":
    unittest.main()
