"""Capture, upload and record flow for one door event."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Final
from uuid import uuid4
import logging

from doorcam.capture import capture_clip, extract_thumbnail, locate_ffmpeg, temp_artifacts
from doorcam.config import AppSettings
from doorcam.db.models import ACCESS_STATUSES
from doorcam.exceptions import (
    ConfigurationError,
    DoorCamError,
    InvalidRequestError,
    PersistenceError,
    StorageUnconfiguredError,
    UploadError,
)
from doorcam.probes import check_storage_writable
from doorcam.storage import BlobStore, RecordStore, Stores


LOGGER = logging.getLogger(__name__)

MIN_CAPTURE_SECONDS: Final[int] = 1
MAX_CAPTURE_SECONDS: Final[int] = 60
VIDEO_CONTENT_TYPE: Final[str] = "video/mp4"
THUMBNAIL_CONTENT_TYPE: Final[str] = "image/jpeg"


@dataclass(frozen=True, slots=True)
class CaptureResult:
    """Outcome of a successful pipeline run."""

    record_id: str
    video_url: str
    thumbnail_url: str
    timestamp: datetime
    status: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "videoUrl": self.video_url,
            "thumbnailUrl": self.thumbnail_url,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
        }


def validate_capture_request(status: str, duration_seconds: int) -> None:
    """Reject out-of-range requests before any tool or store is touched."""
    if status not in ACCESS_STATUSES:
        raise InvalidRequestError(f"status must be one of: {', '.join(ACCESS_STATUSES)}")
    if (
        isinstance(duration_seconds, bool)
        or not isinstance(duration_seconds, int)
        or not MIN_CAPTURE_SECONDS <= duration_seconds <= MAX_CAPTURE_SECONDS
    ):
        raise InvalidRequestError(
            f"duration must be an integer between {MIN_CAPTURE_SECONDS} and {MAX_CAPTURE_SECONDS}"
        )


def upload_artifact(blob_store: BlobStore, local_path: Path, key: str, content_type: str) -> str:
    """Upload one local file and return its retrievable URL."""
    try:
        data = local_path.read_bytes()
        LOGGER.info("Uploading %s (%s bytes, %s)", key, len(data), content_type)
        handle = blob_store.upload(data, key, content_type)
        url = blob_store.get_url(handle)
    except StorageUnconfiguredError:
        raise
    except Exception as exc:
        raise UploadError(f"Upload of {key} failed: {exc}") from exc
    if not url:
        raise UploadError(f"Upload of {key} returned no URL")
    LOGGER.info("Uploaded %s -> %s", key, url)
    return url


def persist_access_record(
    record_store: RecordStore,
    status: str,
    video_url: str,
    thumbnail_url: str,
    now: datetime | None = None,
) -> str:
    """Write the access record document and return its id."""
    now = now or datetime.now(timezone.utc)
    fields = {
        "time": now,
        "status": status,
        "photo": thumbnail_url,
        "videoUrl": video_url,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        record_id = record_store.create(fields)
    except Exception as exc:
        raise PersistenceError(f"Saving access record failed: {exc}") from exc
    LOGGER.info("Access record %s saved with status=%s", record_id, status)
    return record_id


def run_capture_pipeline(
    status: str,
    duration_seconds: int,
    *,
    settings: AppSettings,
    stores: Stores,
    run_id: str | None = None,
) -> CaptureResult:
    """Record a clip, extract its thumbnail, upload both, then save the access record."""
    validate_capture_request(status, duration_seconds)
    if not settings.stream_url:
        raise ConfigurationError("MJPEG_STREAM_URL is not configured.")
    stores.blobs.check_configured()

    tool = locate_ffmpeg(settings.ffmpeg_bin)
    if settings.storage_preflight:
        check_storage_writable(stores.blobs)

    timestamp = datetime.now(timezone.utc)
    run_id = run_id or uuid4().hex
    try:
        with temp_artifacts(run_id, timestamp, settings.temp_dir) as artifacts:
            capture_clip(
                tool,
                settings.stream_url,
                duration_seconds,
                artifacts.video_path,
                timeout_sec=duration_seconds + settings.capture_timeout_grace_seconds,
            )
            extract_thumbnail(
                tool,
                artifacts.video_path,
                artifacts.thumbnail_path,
                timeout_sec=settings.thumbnail_timeout_seconds,
            )
            video_url = upload_artifact(
                stores.blobs,
                artifacts.video_path,
                f"videos/{artifacts.video_filename}",
                VIDEO_CONTENT_TYPE,
            )
            thumbnail_url = upload_artifact(
                stores.blobs,
                artifacts.thumbnail_path,
                f"thumbnails/{artifacts.thumbnail_filename}",
                THUMBNAIL_CONTENT_TYPE,
            )
            record_id = persist_access_record(stores.records, status, video_url, thumbnail_url)
    except DoorCamError as exc:
        LOGGER.error("Capture run %s failed: %s", run_id, exc)
        raise

    return CaptureResult(
        record_id=record_id,
        video_url=video_url,
        thumbnail_url=thumbnail_url,
        timestamp=timestamp,
        status=status,
    )
