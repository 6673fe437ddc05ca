"""Per-run temporary clip and thumbnail paths with guaranteed cleanup."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator
import logging


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TempArtifacts:
    """Local paths owned by one pipeline run."""

    video_path: Path
    thumbnail_path: Path

    @property
    def video_filename(self) -> str:
        return self.video_path.name

    @property
    def thumbnail_filename(self) -> str:
        return self.thumbnail_path.name

    def paths(self) -> tuple[Path, Path]:
        return self.video_path, self.thumbnail_path


def artifact_filenames(run_id: str, timestamp: datetime) -> tuple[str, str]:
    """Return (video, thumbnail) filenames unique to a run."""
    date_string = timestamp.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
    date_string = date_string.replace("+00-00", "Z")
    return f"record_{date_string}_{run_id}.mp4", f"thumbnail_{date_string}_{run_id}.jpg"


def remove_quietly(path: Path) -> bool:
    """Delete `path`, logging instead of raising. Returns True when a file was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        LOGGER.debug("Temporary file already absent: %s", path)
        return False
    except OSError as exc:
        LOGGER.warning("Failed to remove temporary file %s: %s", path, exc)
        return False
    return True


@contextmanager
def temp_artifacts(run_id: str, timestamp: datetime, temp_dir: str | Path) -> Iterator[TempArtifacts]:
    """Yield the run's temp paths and remove whatever exists on exit."""
    root = Path(temp_dir)
    root.mkdir(parents=True, exist_ok=True)
    video_name, thumbnail_name = artifact_filenames(run_id, timestamp)
    artifacts = TempArtifacts(video_path=root / video_name, thumbnail_path=root / thumbnail_name)
    try:
        yield artifacts
    finally:
        removed = [path.name for path in artifacts.paths() if remove_quietly(path)]
        if removed:
            LOGGER.info("Removed temporary files: %s", ", ".join(removed))
