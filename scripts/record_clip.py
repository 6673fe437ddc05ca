"""Record one door event clip, upload it and save the access record."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from doorcam.config import load_settings
from doorcam.db.models import ACCESS_STATUSES
from doorcam.exceptions import DoorCamError
from doorcam.service import run_capture_pipeline
from doorcam.storage import build_stores


def build_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Record a clip from the door camera stream and save an access record."
    )
    parser.add_argument(
        "--status",
        choices=ACCESS_STATUSES,
        default="unknown",
        help="Access status to record (default: unknown).",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Clip length in seconds, 1-60 (default: DEFAULT_CAPTURE_SECONDS or 15).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log ffmpeg diagnostics.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the script and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = load_settings()
        duration = args.duration if args.duration is not None else settings.default_capture_seconds
        result = run_capture_pipeline(
            args.status,
            duration,
            settings=settings,
            stores=build_stores(settings),
        )
    except DoorCamError as exc:
        print(json.dumps({"success": False, "message": str(exc)}))
        return 2
    except Exception as exc:  # pragma: no cover - defensive guard
        print(json.dumps({"success": False, "message": f"Unexpected error: {exc}"}))
        return 1

    print(json.dumps({"success": True, "data": result.to_payload()}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
