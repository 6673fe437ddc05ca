from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from doorcam.capture.temp_files import artifact_filenames, remove_quietly, temp_artifacts


STAMP = datetime(2026, 10, 19, 9, 30, 15, 123000, tzinfo=timezone.utc)


class ArtifactFilenameTests(unittest.TestCase):
    def test_names_include_timestamp_and_run_id(self) -> None:
        video, thumbnail = artifact_filenames("abc123", STAMP)

        self.assertEqual(video, "record_2026-10-19T09-30-15-123Z_abc123.mp4")
        self.assertEqual(thumbnail, "thumbnail_2026-10-19T09-30-15-123Z_abc123.jpg")


class TempArtifactsTests(unittest.TestCase):
    def test_files_removed_on_success(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with temp_artifacts("run1", STAMP, tmpdir) as artifacts:
                artifacts.video_path.write_bytes(b"mp4")
                artifacts.thumbnail_path.write_bytes(b"jpg")

            self.assertEqual(list(Path(tmpdir).iterdir()), [])

    def test_files_removed_on_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(RuntimeError):
                with temp_artifacts("run2", STAMP, tmpdir) as artifacts:
                    artifacts.video_path.write_bytes(b"partial")
                    raise RuntimeError("ffmpeg died")

            self.assertEqual(list(Path(tmpdir).iterdir()), [])

    def test_missing_files_do_not_raise(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with temp_artifacts("run3", STAMP, tmpdir) as artifacts:
                self.assertFalse(artifacts.video_path.exists())

        self.assertFalse(remove_quietly(Path(tmpdir) / "gone.mp4"))

    def test_concurrent_runs_get_distinct_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with temp_artifacts("run-a", STAMP, tmpdir) as first, temp_artifacts("run-b", STAMP, tmpdir) as second:
                self.assertNotEqual(first.video_path, second.video_path)
                self.assertNotEqual(first.thumbnail_path, second.thumbnail_path)


if __name__ == "__main__":
    unittest.main()
