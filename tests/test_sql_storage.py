from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from doorcam.db import Base, make_engine, make_session_factory
from doorcam.exceptions import StorageUnconfiguredError
from doorcam.storage.sql import SqlBlobStore, SqlRecordStore


T0 = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _fields(status: str, when: datetime) -> dict:
    return {
        "time": when,
        "status": status,
        "photo": f"http://doorcam.test/blobs/thumbnails/{status}.jpg",
        "videoUrl": f"http://doorcam.test/blobs/videos/{status}.mp4",
        "createdAt": when,
        "updatedAt": when,
    }


class SqlStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(engine)
        self.addCleanup(engine.dispose)
        self.factory = make_session_factory(engine)


class SqlBlobStoreTests(SqlStoreTestCase):
    def test_upload_and_read_back(self) -> None:
        store = SqlBlobStore(self.factory, "http://doorcam.test/")

        handle = store.upload(b"mp4-bytes", "videos/record_1.mp4", "video/mp4")

        self.assertEqual(store.get_url(handle), "http://doorcam.test/blobs/videos/record_1.mp4")
        self.assertEqual(store.read("videos/record_1.mp4"), (b"mp4-bytes", "video/mp4"))
        self.assertIsNone(store.read("videos/missing.mp4"))

    def test_same_key_overwrites(self) -> None:
        store = SqlBlobStore(self.factory, "http://doorcam.test")
        store.upload(b"old", "thumbnails/t.jpg", "image/jpeg")
        store.upload(b"new", "thumbnails/t.jpg", "image/jpeg")

        self.assertEqual(store.read("thumbnails/t.jpg"), (b"new", "image/jpeg"))

    def test_missing_public_base_url(self) -> None:
        store = SqlBlobStore(self.factory, None)

        with self.assertRaises(StorageUnconfiguredError):
            store.check_configured()
        self.assertFalse(store.config_summary()["configured"])

    def test_config_summary_hides_password(self) -> None:
        engine = make_engine("postgresql+psycopg://doorcam:secret@db:5432/doorcam")
        store = SqlBlobStore(make_session_factory(engine), "http://doorcam.test")

        summary = store.config_summary()

        self.assertNotIn("secret", summary["database"])
        self.assertEqual(summary["backend"], "sql")


class SqlRecordStoreTests(SqlStoreTestCase):
    def test_create_assigns_string_id(self) -> None:
        store = SqlRecordStore(self.factory)

        record_id = store.create(_fields("entry", T0))

        self.assertIsInstance(record_id, str)
        self.assertTrue(record_id)
        row = store.get(record_id)
        self.assertEqual(row.status, "entry")
        self.assertEqual(row.video_url, "http://doorcam.test/blobs/videos/entry.mp4")
        self.assertEqual(row.to_dict()["photo"], "http://doorcam.test/blobs/thumbnails/entry.jpg")

    def test_get_missing(self) -> None:
        self.assertIsNone(SqlRecordStore(self.factory).get("nope"))

    def test_list_newest_first_with_filter_and_limit(self) -> None:
        store = SqlRecordStore(self.factory)
        store.create(_fields("entry", T0))
        store.create(_fields("exit", T0 + timedelta(minutes=5)))
        store.create(_fields("entry", T0 + timedelta(minutes=10)))

        all_rows = store.list()
        entries = store.list(status="entry")
        latest = store.list(limit=1)

        self.assertEqual([row.status for row in all_rows], ["entry", "exit", "entry"])
        self.assertEqual(len(entries), 2)
        self.assertEqual(len(latest), 1)
        self.assertEqual(latest[0].id, all_rows[0].id)


if __name__ == "__main__":
    unittest.main()
