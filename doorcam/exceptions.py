"""Custom exceptions for the capture-and-persist pipeline."""

from __future__ import annotations


class DoorCamError(Exception):
    """Base exception for all pipeline failures."""


class InvalidRequestError(DoorCamError):
    """Raised when a capture request is out of range."""


class ConfigurationError(DoorCamError):
    """Raised when required configuration (stream URL, storage) is missing."""


class CaptureError(DoorCamError):
    """Base exception for external capture tool failures."""


class ToolUnavailableError(CaptureError):
    """Raised when the capture tool cannot be located on the host."""

    def __init__(self, message: str, remediation: str = "") -> None:
        super().__init__(f"{message}\n{remediation}" if remediation else message)
        self.remediation = remediation


class ProcessFailedError(CaptureError):
    """Raised when the capture tool exits with a non-zero status."""

    MESSAGE_TAIL_LINES = 5

    def __init__(self, message: str, exit_code: int, diagnostics: str = "") -> None:
        tail = "\n".join(diagnostics.strip().splitlines()[-self.MESSAGE_TAIL_LINES:])
        super().__init__(f"{message} (exit code {exit_code}): {tail}")
        self.exit_code = exit_code
        self.diagnostics = diagnostics


class ArtifactMissingError(CaptureError):
    """Raised when the tool reported success but produced no output file."""


class ToolTimeoutError(CaptureError):
    """Raised when the capture tool runs past its deadline and is killed."""


class ProbeError(DoorCamError):
    """Raised when a connectivity probe fails."""


class ProbeTimeoutError(ProbeError):
    """Raised when a connectivity probe exceeds its deadline."""


class StorageError(DoorCamError):
    """Base exception for blob and record store failures."""


class StorageUnconfiguredError(StorageError, ConfigurationError):
    """Raised when required storage configuration fields are absent."""


class StorageWriteError(StorageError):
    """Raised when the storage write probe cannot write its test object."""


class UploadError(StorageError):
    """Raised when an artifact cannot be uploaded to the blob store."""


class PersistenceError(StorageError):
    """Raised when an access record cannot be written to the record store."""
