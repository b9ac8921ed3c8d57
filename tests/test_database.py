"""
Tests for the SQLite and in-memory record stores.
"""

import asyncio

import pytest

from conftest import make_game, make_thread
from yam_library.database import (
    DatabaseManager,
    DuplicateRecordError,
    InMemoryRecordStore,
)
from yam_library.models import GameRecord, ThreadRecord


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "games.db"


class TestSqliteRecordStore:
    def test_insert_and_search(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.games.insert(make_game(1, "Alpha", ["a"], save_paths=["/saves/a"]))
                await db.games.insert(make_game(2, "Beta"))
                return await db.games.search({}), await db.games.search({"name": "Beta"})

        everything, beta = run(scenario())

        assert [g.id for g in everything] == [1, 2]
        assert everything[0].save_paths == ["/saves/a"]
        assert [g.id for g in beta] == [2]

    def test_duplicate_insert_raises(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.games.insert(make_game(1, "Alpha"))
                await db.games.insert(make_game(1, "Alpha again"))

        with pytest.raises(DuplicateRecordError):
            run(scenario())

    def test_write_replaces_whole_record(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.threads.insert(make_thread(5, "Old", tags=["x"]))
                await db.threads.write(make_thread(5, "New", update_available=True))
                return await db.threads.search({"id": 5})

        (record,) = run(scenario())
        assert record.name == "New"
        assert record.tags == []
        assert record.update_available is True

    def test_boolean_filter_and_sort(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.threads.write(make_thread(1, "Zeta", update_available=True))
                await db.threads.write(make_thread(2, "Alpha", update_available=True))
                await db.threads.write(make_thread(3, "Beta"))
                await db.threads.write(
                    make_thread(4, "Gamma", update_available=True, marked_as_read=True)
                )
                ascending = await db.threads.search(
                    {"update_available": True, "marked_as_read": False}, {"name": 1}
                )
                descending = await db.threads.search({}, {"name": -1})
                return ascending, descending

        ascending, descending = run(scenario())
        assert [t.name for t in ascending] == ["Alpha", "Zeta"]
        assert [t.name for t in descending] == ["Zeta", "Gamma", "Beta", "Alpha"]

    def test_remove_and_ids(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.games.insert(make_game(1, "Alpha"))
                await db.games.insert(make_game(2, "Beta"))
                removed = await db.games.remove(1)
                missing = await db.games.remove(1)
                return removed, missing, await db.games.ids()

        assert run(scenario()) == (True, False, {2})

    def test_data_persists_between_sessions(self, db_path):
        async def first():
            async with DatabaseManager(db_path) as db:
                await db.games.insert(make_game(1, "Alpha", version="1.0"))

        async def second():
            async with DatabaseManager(db_path) as db:
                return await db.games.search({"id": 1})

        run(first())
        (record,) = run(second())
        assert record.version == "1.0"

    def test_unknown_field_rejected(self, db_path):
        async def scenario():
            async with DatabaseManager(db_path) as db:
                await db.games.search({"name; DROP TABLE games": 1})

        with pytest.raises(ValueError):
            run(scenario())

    def test_requires_initialize(self, db_path):
        db = DatabaseManager(db_path)
        with pytest.raises(RuntimeError):
            run(db.games.search({}))


class TestInMemoryRecordStore:
    def test_records_are_copied(self):
        store = InMemoryRecordStore(GameRecord)
        record = make_game(1, "Alpha", ["a"])
        run(store.insert(record))
        record.tags.append("changed")

        fetched = run(store.search({"id": 1}))[0]
        fetched.name = "Changed"

        assert run(store.search({"id": 1}))[0].tags == ["a"]
        assert run(store.search({"id": 1}))[0].name == "Alpha"

    def test_multi_field_sort(self):
        store = InMemoryRecordStore(ThreadRecord, [
            make_thread(1, "B", update_available=True),
            make_thread(2, "A"),
            make_thread(3, "A", update_available=True),
        ])
        result = run(store.search({}, {"name": 1, "update_available": -1}))
        assert [t.id for t in result] == [3, 2, 1]

    def test_invalid_sort_direction(self):
        store = InMemoryRecordStore(GameRecord)
        with pytest.raises(ValueError):
            run(store.search({}, {"name": 0}))
