"""ffmpeg integration for recording clips from the door camera stream."""

from .ffmpeg import (
    ToolHandle,
    capture_clip,
    check_tool_installation,
    extract_thumbnail,
    install_hint,
    locate_ffmpeg,
    redact_credentials,
    tool_version,
)
from .temp_files import TempArtifacts, artifact_filenames, remove_quietly, temp_artifacts

__all__ = [
    "TempArtifacts",
    "ToolHandle",
    "artifact_filenames",
    "capture_clip",
    "check_tool_installation",
    "extract_thumbnail",
    "install_hint",
    "locate_ffmpeg",
    "redact_credentials",
    "remove_quietly",
    "temp_artifacts",
    "tool_version",
]
