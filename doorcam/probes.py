"""Connectivity probes for the live stream and the blob store."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Final
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen
import logging
import subprocess

from doorcam.capture.ffmpeg import locate_ffmpeg, redact_credentials
from doorcam.exceptions import (
    ConfigurationError,
    DoorCamError,
    ProbeError,
    ProbeTimeoutError,
    StorageError,
    StorageUnconfiguredError,
    StorageWriteError,
)
from doorcam.storage.base import BlobStore


LOGGER = logging.getLogger(__name__)

SOURCE_PROBE_TIMEOUT_SEC: Final[float] = 5.0
ADVANCED_PROBE_TIMEOUT_SEC: Final[float] = 10.0
USER_AGENT: Final[str] = "DoorCam/1.0"
STREAM_MARKERS: Final[tuple[str, ...]] = ("Stream #0", "Video:")
STORAGE_TEST_PAYLOAD: Final[bytes] = bytes([1, 2, 3, 4, 5])


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a storage probe, for reporting only."""

    success: bool
    config: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "config": self.config}
        if self.error is not None:
            payload["error"] = self.error
        return payload


def _require_stream_url(stream_url: str | None) -> str:
    if not stream_url:
        raise ConfigurationError("MJPEG_STREAM_URL is not configured.")
    return stream_url


def _fetch_headers(request: Request, timeout_sec: float) -> tuple[int, str]:
    with urlopen(request, timeout=timeout_sec) as response:
        return getattr(response, "status", 200), response.headers.get("Content-Type") or ""


def probe_source(stream_url: str | None, timeout_sec: float = SOURCE_PROBE_TIMEOUT_SEC) -> bool:
    """Check the stream answers a GET with a multipart or image payload within `timeout_sec` overall."""
    url = _require_stream_url(stream_url)
    LOGGER.info("Probing stream %s", redact_credentials(url))
    request = Request(url, headers={"User-Agent": USER_AGENT}, method="GET")

    # urlopen's timeout bounds each socket operation only; the future bounds the whole request.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="doorcam-source-check")
    future = executor.submit(_fetch_headers, request, timeout_sec)
    try:
        status, content_type = future.result(timeout=timeout_sec)
    except FutureTimeoutError as exc:
        future.cancel()
        raise ProbeTimeoutError(f"Stream did not respond within {timeout_sec:g}s.") from exc
    except HTTPError as exc:
        raise ProbeError(f"HTTP response error: {exc.code} {exc.reason}") from exc
    except TimeoutError as exc:
        raise ProbeTimeoutError(f"Stream did not respond within {timeout_sec:g}s.") from exc
    except URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise ProbeTimeoutError(f"Stream did not respond within {timeout_sec:g}s.") from exc
        raise ProbeError(f"Stream connection failed: {redact_credentials(str(exc.reason))}") from exc
    except OSError as exc:
        raise ProbeError(f"Stream connection failed: {redact_credentials(str(exc))}") from exc
    finally:
        executor.shutdown(wait=False)

    if not 200 <= status < 300:
        raise ProbeError(f"HTTP response error: {status}")

    LOGGER.debug("Stream Content-Type: %s", content_type)
    lowered = content_type.lower()
    if "multipart" not in lowered and "image" not in lowered:
        raise ProbeError(f"Unexpected Content-Type: {content_type or '<missing>'}")
    return True


def probe_source_advanced(
    stream_url: str | None,
    ffmpeg_bin: str = "ffmpeg",
    timeout_sec: float = ADVANCED_PROBE_TIMEOUT_SEC,
) -> bool:
    """Decode one second of the stream with ffmpeg and look for video stream markers."""
    url = _require_stream_url(stream_url)
    tool = locate_ffmpeg(ffmpeg_bin)
    command = [tool.path, "-i", url, "-t", "1", "-f", "null", "-"]

    try:
        proc = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout_sec,
        )
    except subprocess.TimeoutExpired as exc:
        raise ProbeTimeoutError(f"ffmpeg stream probe timed out after {timeout_sec:g}s.") from exc
    except OSError as exc:
        raise ProbeError(f"ffmpeg could not start for the stream check: {exc}") from exc

    diagnostics = redact_credentials(proc.stderr or "")
    if any(marker in diagnostics for marker in STREAM_MARKERS):
        return True
    raise ProbeError(f"No video data found in stream. ffmpeg output: {diagnostics.strip()}")


def probe_stream(stream_url: str | None, ffmpeg_bin: str = "ffmpeg") -> bool:
    """Run the HTTP probe, then the ffmpeg probe as an advisory second step."""
    probe_source(stream_url)
    try:
        probe_source_advanced(stream_url, ffmpeg_bin=ffmpeg_bin)
    except DoorCamError as exc:
        LOGGER.warning("Advanced stream probe failed, keeping simple probe result: %s", exc)
    return True


def check_storage_writable(blob_store: BlobStore, now: datetime | None = None) -> str:
    """Write a small test object and return its URL. The object is left in place."""
    blob_store.check_configured()
    now = now or datetime.now(timezone.utc)
    key = f"test/connection-test-{int(now.timestamp() * 1000)}.bin"
    try:
        handle = blob_store.upload(STORAGE_TEST_PAYLOAD, key, "application/octet-stream")
        url = blob_store.get_url(handle)
    except StorageUnconfiguredError:
        raise
    except Exception as exc:
        raise StorageWriteError(f"Storage connection failed: {exc}") from exc
    LOGGER.info("Storage probe wrote %s", url)
    return url


def probe_storage(blob_store: BlobStore, now: datetime | None = None) -> ProbeResult:
    """Report whether the blob store accepts writes."""
    config = blob_store.config_summary()
    try:
        url = check_storage_writable(blob_store, now=now)
    except StorageError as exc:
        LOGGER.warning("Storage probe failed: %s", exc)
        return ProbeResult(success=False, config=config, error=str(exc))
    return ProbeResult(success=True, config=config, url=url)
