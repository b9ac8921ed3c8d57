"""
Record stores for the game library.

The engine components only depend on the RecordStore query contract:
- search(filter, sort) -> records matching every field of `filter`
- insert(record)       -> add a record with a new id
- write(record)        -> full replace (upsert) by id
- remove(record_id)    -> delete by id

Two implementations are provided:
- SqliteRecordStore, backed by aiosqlite, one table per record type holding
  the msgspec-encoded JSON document of each record
- InMemoryRecordStore, for tests and ephemeral sessions

DatabaseManager owns the SQLite file and creates the two stores used by the
application (installed games and watched threads). It is created explicitly
and passed to whoever needs it.
"""

import asyncio
import copy
import re
import sqlite3
from pathlib import Path
from typing import Any, Dict, Generic, List, Mapping, Optional, Protocol, Type, TypeVar

import aiosqlite
import msgspec

from yam_library.logger import setup_logger
from yam_library.models import GameRecord, ThreadRecord, encode_json, decode_json

logger = setup_logger()

R = TypeVar("R", bound=msgspec.Struct)

Filter = Mapping[str, Any]
Sort = Mapping[str, int]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DuplicateRecordError(Exception):
    """Raised when inserting a record whose id is already stored"""

    def __init__(self, table: str, record_id: int):
        super().__init__(f"Record {record_id} already exists in {table}")
        self.table = table
        self.record_id = record_id


class RecordStore(Protocol[R]):
    async def search(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> List[R]:
        ...

    async def insert(self, record: R) -> None:
        ...

    async def write(self, record: R) -> None:
        ...

    async def remove(self, record_id: int) -> bool:
        ...

    async def ids(self) -> set[int]:
        ...


def _field_names(record_type: Type[msgspec.Struct]) -> frozenset:
    return frozenset(f.name for f in msgspec.structs.fields(record_type))


def _check_fields(record_type, fields) -> None:
    """Only allow filtering and sorting on fields of the record type"""
    known = _field_names(record_type)
    for name in fields:
        if name not in known or not _IDENTIFIER.match(name):
            raise ValueError(f"Unknown field '{name}' for {record_type.__name__}")


def _check_sort(sort: Sort) -> None:
    for name, direction in sort.items():
        if direction not in (1, -1):
            raise ValueError(f"Sort direction for '{name}' must be 1 or -1, got {direction}")


# =============================================================================
# In-memory store
# =============================================================================

class InMemoryRecordStore(Generic[R]):
    """
    Record store kept in a dict.

    Records are copied on the way in and out so callers cannot change
    stored data without calling write().
    """

    def __init__(self, record_type: Type[R], records: Optional[List[R]] = None):
        self.record_type = record_type
        self._records: Dict[int, R] = {}
        for record in records or []:
            self._records[record.id] = copy.deepcopy(record)

    async def search(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> List[R]:
        filter = filter or {}
        sort = sort or {}
        _check_fields(self.record_type, filter)
        _check_fields(self.record_type, sort)
        _check_sort(sort)

        matches = [
            record for record in self._records.values()
            if all(getattr(record, name) == value for name, value in filter.items())
        ]
        # Apply the least significant key first, the sort is stable
        for name, direction in reversed(list(sort.items())):
            matches.sort(key=lambda record: getattr(record, name), reverse=direction == -1)
        return [copy.deepcopy(record) for record in matches]

    async def insert(self, record: R) -> None:
        if record.id in self._records:
            raise DuplicateRecordError(self.record_type.__name__, record.id)
        self._records[record.id] = copy.deepcopy(record)

    async def write(self, record: R) -> None:
        self._records[record.id] = copy.deepcopy(record)

    async def remove(self, record_id: int) -> bool:
        return self._records.pop(record_id, None) is not None

    async def ids(self) -> set[int]:
        return set(self._records)


# =============================================================================
# SQLite store
# =============================================================================

class SqliteRecordStore(Generic[R]):
    """Record store persisted as JSON documents in a SQLite table"""

    def __init__(self, manager: "DatabaseManager", table: str, record_type: Type[R]):
        self._manager = manager
        self.table = table
        self.record_type = record_type

    @staticmethod
    def _column(name: str) -> str:
        return "id" if name == "id" else f"json_extract(data, '$.{name}')"

    def _build_query(self, filter: Filter, sort: Sort):
        clauses = []
        params = []
        for name, value in filter.items():
            column = self._column(name)
            if value is None:
                clauses.append(f"{column} IS NULL")
                continue
            if isinstance(value, (list, dict, msgspec.Struct)):
                raise ValueError(f"Cannot filter on non-scalar field '{name}'")
            clauses.append(f"{column} = ?")
            params.append(int(value) if isinstance(value, bool) else value)

        query = f"SELECT data FROM {self.table}"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)

        order = [
            f"{self._column(name)} {'ASC' if direction == 1 else 'DESC'}"
            for name, direction in sort.items()
        ]
        order.append("id ASC")
        query += " ORDER BY " + ", ".join(order)
        return query, params

    async def search(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> List[R]:
        filter = filter or {}
        sort = sort or {}
        _check_fields(self.record_type, filter)
        _check_fields(self.record_type, sort)
        _check_sort(sort)

        query, params = self._build_query(filter, sort)
        conn = self._manager.connection
        async with conn.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [decode_json(row[0].encode("utf-8"), type=self.record_type) for row in rows]

    async def insert(self, record: R) -> None:
        conn = self._manager.connection
        try:
            await conn.execute(
                f"INSERT INTO {self.table} (id, data) VALUES (?, ?)",
                (record.id, encode_json(record).decode("utf-8")),
            )
        except sqlite3.IntegrityError as e:
            await conn.rollback()
            raise DuplicateRecordError(self.table, record.id) from e
        await conn.commit()
        logger.debug(f"Inserted record {record.id} into {self.table}")

    async def write(self, record: R) -> None:
        conn = self._manager.connection
        await conn.execute(
            f"""
            INSERT INTO {self.table} (id, data) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET
                data = excluded.data,
                updated_at = CURRENT_TIMESTAMP
            """,
            (record.id, encode_json(record).decode("utf-8")),
        )
        await conn.commit()
        logger.debug(f"Wrote record {record.id} to {self.table}")

    async def remove(self, record_id: int) -> bool:
        conn = self._manager.connection
        cursor = await conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
        removed = cursor.rowcount > 0
        await cursor.close()
        await conn.commit()
        return removed

    async def ids(self) -> set[int]:
        conn = self._manager.connection
        async with conn.execute(f"SELECT id FROM {self.table}") as cursor:
            rows = await cursor.fetchall()
        return {row[0] for row in rows}


class DatabaseManager:
    """
    Owner of the SQLite database holding installed games and watched threads.

    Usage:
        db = DatabaseManager(path)
        await db.initialize()
        games = await db.games.search({})
        await db.close()
    """

    TABLES = {
        "games": GameRecord,
        "threads": ThreadRecord,
    }

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: Optional[aiosqlite.Connection] = None
        self._init_lock = asyncio.Lock()
        self.games: SqliteRecordStore[GameRecord] = SqliteRecordStore(self, "games", GameRecord)
        self.threads: SqliteRecordStore[ThreadRecord] = SqliteRecordStore(self, "threads", ThreadRecord)
        logger.info(f"Database path: {self.db_path}")

    @property
    def initialized(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("Database is not initialized, call initialize() first")
        return self._connection

    async def initialize(self):
        """Initialize database schema and open the connection"""
        async with self._init_lock:
            if self._connection is not None:
                return

            await asyncio.to_thread(self._create_schema)
            self._connection = await aiosqlite.connect(str(self.db_path))
            logger.info("Database initialized successfully")

    async def close(self):
        """Close the database connection"""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _create_schema(self):
        """Create database schema (runs in thread)"""
        conn = sqlite3.connect(str(self.db_path))
        cursor = conn.cursor()

        try:
            for table in self.TABLES:
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id INTEGER PRIMARY KEY,
                        data TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_games_name ON games(json_extract(data, '$.name'))"
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_threads_pending ON threads("
                "json_extract(data, '$.update_available'), json_extract(data, '$.marked_as_read'))"
            )

            conn.commit()
            logger.info("Database schema created successfully")

        except Exception as e:
            logger.error(f"Error creating database schema: {e}", exc_info=True)
            conn.rollback()
            raise
        finally:
            conn.close()
