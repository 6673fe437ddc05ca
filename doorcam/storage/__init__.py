"""Blob and record store backends."""

from __future__ import annotations

from dataclasses import dataclass

from doorcam.config import AppSettings
from doorcam.db.session import make_engine, make_session_factory

from .base import ACCESS_RECORDS_COLLECTION, BlobHandle, BlobStore, RecordStore, StoredRecord
from .sql import SqlBlobStore, SqlRecordStore


@dataclass(frozen=True)
class Stores:
    """Blob and record store pair built once per process."""

    blobs: BlobStore
    records: RecordStore


def build_stores(settings: AppSettings) -> Stores:
    """Construct the configured storage backend."""
    if settings.storage_backend == "firebase":
        from .firebase import FirebaseBlobStore, FirebaseClient, FirestoreRecordStore

        client = FirebaseClient.from_settings(settings)
        return Stores(blobs=FirebaseBlobStore(client), records=FirestoreRecordStore(client))

    factory = make_session_factory(make_engine(settings.database_url))
    return Stores(
        blobs=SqlBlobStore(factory, settings.public_base_url),
        records=SqlRecordStore(factory),
    )


__all__ = [
    "ACCESS_RECORDS_COLLECTION",
    "BlobHandle",
    "BlobStore",
    "RecordStore",
    "SqlBlobStore",
    "SqlRecordStore",
    "StoredRecord",
    "Stores",
    "build_stores",
]
