from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from datetime import datetime, timezone
import io
import json
import unittest
from unittest.mock import patch

from doorcam.exceptions import ToolUnavailableError
from doorcam.service import CaptureResult
from scripts import record_clip

from fakes import make_settings, make_stores


class RecordClipScriptTests(unittest.TestCase):
    def setUp(self) -> None:
        settings_patcher = patch("scripts.record_clip.load_settings", return_value=make_settings())
        stores_patcher = patch("scripts.record_clip.build_stores", return_value=make_stores())
        settings_patcher.start()
        stores_patcher.start()
        self.addCleanup(settings_patcher.stop)
        self.addCleanup(stores_patcher.stop)

    @patch("scripts.record_clip.run_capture_pipeline")
    def test_main_success(self, mock_pipeline) -> None:
        mock_pipeline.return_value = CaptureResult(
            record_id="rec-1",
            video_url="https://blobs.test/videos/v.mp4",
            thumbnail_url="https://blobs.test/thumbnails/t.jpg",
            timestamp=datetime.now(timezone.utc),
            status="entry",
        )

        stdout = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(io.StringIO()):
            exit_code = record_clip.main(["--status", "entry", "--duration", "5"])

        payload = json.loads(stdout.getvalue())
        self.assertEqual(exit_code, 0)
        self.assertTrue(payload["success"])
        self.assertEqual(payload["data"]["id"], "rec-1")
        self.assertEqual(mock_pipeline.call_args.args, ("entry", 5))

    @patch("scripts.record_clip.run_capture_pipeline")
    def test_default_duration_from_settings(self, mock_pipeline) -> None:
        mock_pipeline.side_effect = ToolUnavailableError("ffmpeg not found", "sudo apt install ffmpeg")

        stdout = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(io.StringIO()):
            exit_code = record_clip.main([])

        payload = json.loads(stdout.getvalue())
        self.assertEqual(exit_code, 2)
        self.assertFalse(payload["success"])
        self.assertIn("apt install ffmpeg", payload["message"])
        self.assertEqual(mock_pipeline.call_args.args, ("unknown", 15))

    def test_rejects_unknown_status(self) -> None:
        stderr = io.StringIO()
        with self.assertRaises(SystemExit) as ctx:
            with redirect_stderr(stderr):
                record_clip.main(["--status", "sideways"])

        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("--status", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
