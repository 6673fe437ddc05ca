"""Helpers to record a clip and a thumbnail from the live MJPEG stream with ffmpeg."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final
import logging
import re
import shutil
import subprocess
import sys

from doorcam.exceptions import (
    ArtifactMissingError,
    ProcessFailedError,
    ToolTimeoutError,
    ToolUnavailableError,
)


LOGGER = logging.getLogger(__name__)

THUMBNAIL_OFFSET: Final[str] = "00:00:01"
THUMBNAIL_JPEG_QUALITY: Final[int] = 2
VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(r"ffmpeg version (\S+)")
URL_CREDENTIALS_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/\s@]+@")
INSTALL_HINTS: Final[dict[str, str]] = {
    "win32": "Download ffmpeg from https://ffmpeg.org/download.html and add it to PATH.",
    "darwin": "Install ffmpeg with: brew install ffmpeg",
    "linux": "Install ffmpeg with: sudo apt install ffmpeg",
}


@dataclass(frozen=True, slots=True)
class ToolHandle:
    """Resolved ffmpeg executable."""

    path: str
    method: str = "system"


def install_hint(platform: str | None = None) -> str:
    """Return the ffmpeg install command for the given (or current) platform."""
    platform = platform or sys.platform
    for prefix, hint in INSTALL_HINTS.items():
        if platform.startswith(prefix):
            return hint
    return INSTALL_HINTS["linux"]


def locate_ffmpeg(ffmpeg_bin: str = "ffmpeg") -> ToolHandle:
    """Resolve the ffmpeg executable from the host search path."""
    resolved = shutil.which(ffmpeg_bin)
    if resolved is None:
        raise ToolUnavailableError(
            f"Required binary not found in PATH: {ffmpeg_bin}",
            remediation=install_hint(),
        )
    if not Path(resolved).exists():
        raise ToolUnavailableError(
            f"Resolved ffmpeg path does not exist: {resolved}",
            remediation=install_hint(),
        )
    LOGGER.debug("Using system ffmpeg at %s", resolved)
    return ToolHandle(path=resolved)


def check_tool_installation(ffmpeg_bin: str = "ffmpeg") -> dict[str, object]:
    """Report ffmpeg availability without raising."""
    try:
        handle = locate_ffmpeg(ffmpeg_bin)
    except ToolUnavailableError as exc:
        return {"available": False, "error": str(exc)}
    return {"available": True, "path": handle.path, "method": handle.method}


def tool_version(tool: ToolHandle, timeout_sec: float = 10.0) -> str | None:
    """Best-effort parse of `ffmpeg -version`; None when it cannot be determined."""
    try:
        proc = subprocess.run(
            [tool.path, "-version"],
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout_sec,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        LOGGER.warning("Unable to read ffmpeg version: %s", exc)
        return None
    match = VERSION_PATTERN.search(proc.stdout)
    return match.group(1) if match else None


def build_capture_command(tool: ToolHandle, stream_url: str, duration_seconds: int, output_path: Path) -> list[str]:
    """Command recording `duration_seconds` of the stream into a web-playable MP4."""
    return [
        tool.path,
        "-y",
        "-i",
        stream_url,
        "-t",
        str(duration_seconds),
        "-c:v",
        "libx264",
        "-preset",
        "fast",
        "-crf",
        "23",
        "-movflags",
        "+faststart",
        str(output_path),
    ]


def build_thumbnail_command(tool: ToolHandle, clip_path: Path, output_path: Path) -> list[str]:
    """Command extracting one high quality JPEG frame one second into the clip."""
    return [
        tool.path,
        "-y",
        "-i",
        str(clip_path),
        "-ss",
        THUMBNAIL_OFFSET,
        "-vframes",
        "1",
        "-q:v",
        str(THUMBNAIL_JPEG_QUALITY),
        str(output_path),
    ]


def capture_clip(
    tool: ToolHandle,
    stream_url: str,
    duration_seconds: int,
    output_path: Path,
    timeout_sec: float | None = None,
) -> Path:
    """Record a fixed-duration clip from the stream into `output_path`."""
    LOGGER.info("Capturing %ss clip from %s", duration_seconds, redact_credentials(stream_url))
    command = build_capture_command(tool, stream_url, duration_seconds, output_path)
    _run_ffmpeg(command, output_path, stage="capture", timeout_sec=timeout_sec)
    LOGGER.info("Clip written to %s", output_path)
    return output_path


def extract_thumbnail(
    tool: ToolHandle,
    clip_path: Path,
    output_path: Path,
    timeout_sec: float | None = None,
) -> Path:
    """Extract a single still frame from an already captured clip."""
    if not clip_path.exists():
        raise ArtifactMissingError(f"Clip file does not exist: {clip_path}")
    command = build_thumbnail_command(tool, clip_path, output_path)
    _run_ffmpeg(command, output_path, stage="thumbnail", timeout_sec=timeout_sec)
    LOGGER.info("Thumbnail written to %s", output_path)
    return output_path


def _run_ffmpeg(command: list[str], output_path: Path, stage: str, timeout_sec: float | None) -> None:
    try:
        proc = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout_sec,
        )
    except FileNotFoundError as exc:
        raise ToolUnavailableError(
            f"Required binary not found: {command[0]}",
            remediation=install_hint(),
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise ToolTimeoutError(f"ffmpeg {stage} timed out after {timeout_sec}s.") from exc

    diagnostics = redact_credentials(proc.stderr or "")
    if proc.returncode != 0:
        LOGGER.warning("ffmpeg %s exited with code %s: %s", stage, proc.returncode, diagnostics.strip())
        raise ProcessFailedError(f"ffmpeg {stage} failed", proc.returncode, diagnostics)
    LOGGER.debug("ffmpeg %s output: %s", stage, diagnostics.strip())

    if not output_path.exists():
        raise ArtifactMissingError(f"ffmpeg {stage} completed but {output_path.name} was not created.")


def redact_credentials(value: str) -> str:
    """Hide user:password pairs embedded in URLs."""
    return URL_CREDENTIALS_PATTERN.sub(r"\g<scheme><redacted>@", value)
