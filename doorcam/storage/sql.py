"""Database-backed blob and record stores."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from sqlalchemy import desc, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from doorcam.db.models import AccessRecord, StoredBlob
from doorcam.db.session import session_scope
from doorcam.exceptions import StorageUnconfiguredError

from .base import BlobHandle, BlobStore, RecordStore, StoredRecord


class SqlBlobStore(BlobStore):
    """Keeps artifact bytes in the `blobs` table; the web app serves them back."""

    def __init__(self, session_factory: sessionmaker[Session], public_base_url: str | None) -> None:
        self.name = "sql"
        self._session_factory = session_factory
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    def check_configured(self) -> None:
        if not self.public_base_url:
            raise StorageUnconfiguredError("Storage configuration missing: PUBLIC_BASE_URL")

    def upload(self, data: bytes, key: str, content_type: str) -> BlobHandle:
        with session_scope(self._session_factory) as session:
            session.merge(
                StoredBlob(key=key, content_type=content_type, data=data, size_bytes=len(data))
            )
        return BlobHandle(key=key)

    def get_url(self, handle: BlobHandle) -> str:
        self.check_configured()
        return f"{self.public_base_url}/blobs/{quote(handle.key)}"

    def read(self, key: str) -> tuple[bytes, str] | None:
        with session_scope(self._session_factory) as session:
            row = session.get(StoredBlob, key)
            if row is None:
                return None
            return row.data, row.content_type

    def config_summary(self) -> dict[str, Any]:
        engine: Engine | None = self._session_factory.kw.get("bind")
        database = engine.url.render_as_string(hide_password=True) if engine is not None else None
        return {
            "backend": self.name,
            "publicBaseUrl": self.public_base_url,
            "database": database,
            "configured": bool(self.public_base_url),
        }


class SqlRecordStore(RecordStore):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.name = "sql"
        self._session_factory = session_factory

    def create(self, fields: dict[str, Any]) -> str:
        with session_scope(self._session_factory) as session:
            row = AccessRecord(
                time=fields["time"],
                status=fields["status"],
                photo=fields["photo"],
                video_url=fields["videoUrl"],
                created_at=fields["createdAt"],
                updated_at=fields["updatedAt"],
            )
            session.add(row)
            session.flush()
            return row.id

    def get(self, record_id: str) -> StoredRecord | None:
        with session_scope(self._session_factory) as session:
            row = session.get(AccessRecord, record_id)
            return _to_stored(row) if row is not None else None

    def list(self, status: str | None = None, limit: int | None = None) -> list[StoredRecord]:
        stmt = select(AccessRecord).order_by(desc(AccessRecord.time))
        if status is not None:
            stmt = stmt.where(AccessRecord.status == status)
        if limit is not None:
            stmt = stmt.limit(limit)
        with session_scope(self._session_factory) as session:
            return [_to_stored(row) for row in session.execute(stmt).scalars().all()]


def _to_stored(row: AccessRecord) -> StoredRecord:
    return StoredRecord(
        id=row.id,
        time=row.time,
        status=row.status,
        photo=row.photo,
        video_url=row.video_url,
    )
