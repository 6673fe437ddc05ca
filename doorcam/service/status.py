"""System status report for health surfaces."""

from __future__ import annotations

from typing import Any
import platform
import sys

from doorcam.capture import ToolHandle, check_tool_installation, tool_version
from doorcam.config import AppSettings
from doorcam.probes import probe_storage
from doorcam.storage import BlobStore


def system_status(settings: AppSettings, blob_store: BlobStore) -> dict[str, Any]:
    """Collect ffmpeg, storage and environment status. Never echoes the stream URL."""
    ffmpeg_status: dict[str, Any] = dict(check_tool_installation(settings.ffmpeg_bin))
    if ffmpeg_status["available"]:
        ffmpeg_status["version"] = tool_version(ToolHandle(path=str(ffmpeg_status["path"])))

    return {
        "ffmpeg": ffmpeg_status,
        "storage": probe_storage(blob_store).to_dict(),
        "environment": {
            "pythonVersion": platform.python_version(),
            "platform": sys.platform,
            "arch": platform.machine(),
        },
        "streamUrl": {"configured": bool(settings.stream_url)},
    }
