"""Blob and record store interfaces shared by every backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


ACCESS_RECORDS_COLLECTION = "access_records"


@dataclass(frozen=True, slots=True)
class BlobHandle:
    """Opaque reference to an uploaded object."""

    key: str
    download_token: str | None = None


@dataclass(frozen=True, slots=True)
class StoredRecord:
    """Read-side view of an access record."""

    id: str
    time: datetime
    status: str
    photo: str
    video_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "time": self.time.isoformat(),
            "status": self.status,
            "photo": self.photo,
            "videoUrl": self.video_url,
        }


class BlobStore:
    """Durable storage for clip and thumbnail bytes."""

    name: str

    def check_configured(self) -> None:
        """Raise StorageUnconfiguredError when required settings are absent."""
        raise NotImplementedError

    def upload(self, data: bytes, key: str, content_type: str) -> BlobHandle:
        raise NotImplementedError

    def get_url(self, handle: BlobHandle) -> str:
        raise NotImplementedError

    def config_summary(self) -> dict[str, Any]:
        return {"backend": self.name}


class RecordStore:
    """Document store holding access records."""

    name: str

    def create(self, fields: dict[str, Any]) -> str:
        """Insert a new record and return the generated id."""
        raise NotImplementedError

    def get(self, record_id: str) -> StoredRecord | None:
        raise NotImplementedError

    def list(self, status: str | None = None, limit: int | None = None) -> list[StoredRecord]:
        """Records ordered newest first."""
        raise NotImplementedError
