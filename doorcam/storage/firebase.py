"""Firebase Storage and Firestore backends."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote
from uuid import uuid4
import logging

import firebase_admin
from firebase_admin import credentials, firestore, storage

from doorcam.config import AppSettings
from doorcam.exceptions import StorageUnconfiguredError

from .base import ACCESS_RECORDS_COLLECTION, BlobHandle, BlobStore, RecordStore, StoredRecord


LOGGER = logging.getLogger(__name__)

FIREBASE_APP_NAME = "doorcam"
DOWNLOAD_URL_TEMPLATE = "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{key}?alt=media&token={token}"


class FirebaseClient:
    """Owns one lazily initialized firebase_admin app for the process."""

    def __init__(
        self,
        credentials_path: str | None,
        storage_bucket: str | None,
        project_id: str | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        self.credentials_path = credentials_path
        self.storage_bucket = storage_bucket
        self.project_id = project_id
        self.timeout_sec = timeout_sec
        self._app: firebase_admin.App | None = None

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "FirebaseClient":
        return cls(
            credentials_path=settings.firebase_credentials_path,
            storage_bucket=settings.firebase_storage_bucket,
            project_id=settings.firebase_project_id,
            timeout_sec=settings.store_timeout_seconds,
        )

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.credentials_path:
            missing.append("FIREBASE_CREDENTIALS_PATH")
        if not self.storage_bucket:
            missing.append("FIREBASE_STORAGE_BUCKET")
        return missing

    def check_configured(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise StorageUnconfiguredError(f"Firebase configuration missing: {', '.join(missing)}")
        if not Path(self.credentials_path).exists():
            raise StorageUnconfiguredError(
                f"Firebase credentials file not found: {self.credentials_path}"
            )

    def app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        self.check_configured()
        options: dict[str, str] = {"storageBucket": self.storage_bucket}
        if self.project_id:
            options["projectId"] = self.project_id
        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            cred = credentials.Certificate(self.credentials_path)
            self._app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
            LOGGER.info("Firebase initialized for bucket %s", self.storage_bucket)
        return self._app

    def config_summary(self) -> dict[str, Any]:
        return {
            "backend": "firebase",
            "projectId": self.project_id,
            "storageBucket": self.storage_bucket,
            "configured": not self.missing_fields(),
        }


class FirebaseBlobStore(BlobStore):
    def __init__(self, client: FirebaseClient) -> None:
        self.name = "firebase"
        self._client = client

    def check_configured(self) -> None:
        self._client.check_configured()

    def upload(self, data: bytes, key: str, content_type: str) -> BlobHandle:
        bucket = storage.bucket(app=self._client.app())
        token = uuid4().hex
        blob = bucket.blob(key)
        blob.metadata = {"firebaseStorageDownloadTokens": token}
        blob.upload_from_string(data, content_type=content_type, timeout=self._client.timeout_sec)
        return BlobHandle(key=key, download_token=token)

    def get_url(self, handle: BlobHandle) -> str:
        if handle.download_token is None:
            raise ValueError(f"Blob handle for {handle.key} carries no download token")
        return DOWNLOAD_URL_TEMPLATE.format(
            bucket=self._client.storage_bucket,
            key=quote(handle.key, safe=""),
            token=handle.download_token,
        )

    def config_summary(self) -> dict[str, Any]:
        return self._client.config_summary()


class FirestoreRecordStore(RecordStore):
    def __init__(self, client: FirebaseClient) -> None:
        self.name = "firestore"
        self._client = client

    def _collection(self):
        return firestore.client(app=self._client.app()).collection(ACCESS_RECORDS_COLLECTION)

    def create(self, fields: dict[str, Any]) -> str:
        _, doc_ref = self._collection().add(fields, timeout=self._client.timeout_sec)
        return doc_ref.id

    def get(self, record_id: str) -> StoredRecord | None:
        snapshot = self._collection().document(record_id).get(timeout=self._client.timeout_sec)
        if not snapshot.exists:
            return None
        return _to_stored(snapshot.id, snapshot.to_dict() or {})

    def list(self, status: str | None = None, limit: int | None = None) -> list[StoredRecord]:
        query = self._collection()
        if status is not None:
            query = query.where("status", "==", status)
        query = query.order_by("time", direction=firestore.Query.DESCENDING)
        if limit is not None:
            query = query.limit(limit)
        return [
            _to_stored(snapshot.id, snapshot.to_dict() or {})
            for snapshot in query.stream(timeout=self._client.timeout_sec)
        ]


def _to_stored(doc_id: str, data: dict[str, Any]) -> StoredRecord:
    time_value = data.get("time")
    if not isinstance(time_value, datetime):
        raise ValueError(f"Access record {doc_id} has no timestamp")
    return StoredRecord(
        id=doc_id,
        time=time_value,
        status=data.get("status", "unknown"),
        photo=data.get("photo") or "",
        video_url=data.get("videoUrl") or "",
    )
