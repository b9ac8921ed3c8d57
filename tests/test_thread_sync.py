"""
Tests for the synchronization of watched threads.
"""

import asyncio

from conftest import FakeCatalog, make_info, make_thread
from yam_library.database import InMemoryRecordStore
from yam_library.models import ThreadRecord
from yam_library.thread_sync import ThreadSyncEngine

URL_V1 = "https://site.example/threads/cool-game.12345/"
URL_V2 = "https://site.example/threads/cool-game-v2.12345/"


def run(coro):
    return asyncio.run(coro)


def stored(store, thread_id):
    records = run(store.search({"id": thread_id}))
    return records[0] if records else None


class TestSyncWatchedThreads:
    def test_new_thread_is_inserted_without_flags(self, threads):
        catalog = FakeCatalog(by_url={URL_V1: make_info(12345, "Cool Game", URL_V1, ["3dcg"])})
        report = run(ThreadSyncEngine(threads, catalog).sync_watched_threads([URL_V1]))

        assert report.inserted == [12345]
        record = stored(threads, 12345)
        assert record.name == "Cool Game"
        assert record.tags == ["3dcg"]
        assert record.update_available is False
        assert record.marked_as_read is False

    def test_unchanged_url_is_a_no_op(self):
        existing = make_thread(12345, "Cool Game", URL_V1, marked_as_read=True)
        threads = InMemoryRecordStore(ThreadRecord, [existing])
        catalog = FakeCatalog()

        report = run(ThreadSyncEngine(threads, catalog).sync_watched_threads([URL_V1]))

        assert report.unchanged == [12345]
        assert catalog.calls == []
        assert stored(threads, 12345) == existing

    def test_changed_url_flags_update_and_overwrites(self):
        existing = make_thread(12345, "Cool Game", URL_V1, tags=["old"], marked_as_read=True)
        threads = InMemoryRecordStore(ThreadRecord, [existing])
        catalog = FakeCatalog(by_url={
            URL_V2: make_info(12345, "Cool Game", URL_V2, ["new"], version="2.0"),
        })

        report = run(ThreadSyncEngine(threads, catalog).sync_watched_threads([URL_V2]))

        assert report.updated == [12345]
        assert catalog.calls == [("url", URL_V2)]
        record = stored(threads, 12345)
        assert record.url == URL_V2
        assert record.tags == ["new"]
        assert record.version == "2.0"
        assert record.update_available is True
        assert record.marked_as_read is False

    def test_url_without_id_is_skipped(self, threads):
        catalog = FakeCatalog(by_url={URL_V1: make_info(12345, "Cool Game", URL_V1)})
        report = run(ThreadSyncEngine(threads, catalog).sync_watched_threads(
            ["https://site.example/threads/no-id/", URL_V1]
        ))

        assert report.skipped == ["https://site.example/threads/no-id/"]
        assert report.inserted == [12345]

    def test_failure_does_not_abort_batch(self, threads):
        failing = "https://site.example/threads/broken.1/"
        catalog = FakeCatalog(
            by_url={URL_V1: make_info(12345, "Cool Game", URL_V1)},
            failing_urls=[failing],
        )
        report = run(ThreadSyncEngine(threads, catalog).sync_watched_threads([failing, URL_V1]))

        assert [f.url for f in report.failed] == [failing]
        assert "500" in report.failed[0].error
        assert report.inserted == [12345]
        assert stored(threads, 1) is None

    def test_id_comes_from_the_watched_url(self, threads):
        # The catalog answers with a different id, the URL id is the key
        catalog = FakeCatalog(by_url={URL_V1: make_info(999, "Cool Game", "https://other/")})
        run(ThreadSyncEngine(threads, catalog).sync_watched_threads([URL_V1]))

        record = stored(threads, 12345)
        assert record is not None
        assert record.url == URL_V1
        assert stored(threads, 999) is None

    def test_second_sync_with_same_urls_changes_nothing(self, threads):
        catalog = FakeCatalog(by_url={URL_V1: make_info(12345, "Cool Game", URL_V1)})
        engine = ThreadSyncEngine(threads, catalog)
        run(engine.sync_watched_threads([URL_V1]))
        report = run(engine.sync_watched_threads([URL_V1]))

        assert report.unchanged == [12345]
        assert report.processed == 1
        assert stored(threads, 12345).update_available is False
