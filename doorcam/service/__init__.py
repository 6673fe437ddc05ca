"""Service-layer business logic."""

from .pipeline import (
    CaptureResult,
    persist_access_record,
    run_capture_pipeline,
    upload_artifact,
    validate_capture_request,
)
from .status import system_status

__all__ = [
    "CaptureResult",
    "persist_access_record",
    "run_capture_pipeline",
    "system_status",
    "upload_artifact",
    "validate_capture_request",
]
