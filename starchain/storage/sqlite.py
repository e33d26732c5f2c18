# starchain/storage/sqlite.py
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional, Tuple

import aiosqlite

from starchain.config import get_settings
from starchain.core.errors import StorageError
from . import StorageBackend

logger = logging.getLogger(__name__)


class SQLiteStorage(StorageBackend):
    """SQLite block store: one row per block, keyed by integer height."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            db_path = get_settings().db_path

        self.db_path = Path(db_path)
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Storage connection is closed")
        return self._conn

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db_path = self.db_path.resolve()
            self._conn = await aiosqlite.connect(str(self.db_path), isolation_level=None)
            await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._create_schema()
        except (OSError, sqlite3.Error) as e:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
            raise StorageError(f"Could not open block store at {self.db_path}: {e}") from e
        logger.info("Opened block store at %s", self.db_path)

    async def _create_schema(self):
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS blocks (
                height  INTEGER PRIMARY KEY,
                value   TEXT    NOT NULL
            )
        """)

    async def put(self, height: int, value: str) -> None:
        try:
            await self.conn.execute(
                "INSERT INTO blocks (height, value) VALUES (?, ?)",
                (height, value),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Block {height} submission failed: {e}") from e

    async def scan_all(self) -> List[Tuple[int, str]]:
        try:
            async with self.conn.execute(
                "SELECT height, value FROM blocks ORDER BY height ASC"
            ) as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Error reading block store: {e}") from e
        return [(row[0], row[1]) for row in rows]

    async def count(self) -> int:
        async with self.conn.execute("SELECT COUNT(*) FROM blocks") as cursor:
            row = await cursor.fetchone()
        return row[0]

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("Closed block store at %s", self.db_path)

    async def destroy(self) -> None:
        await self.close()
        try:
            for suffix in ("", "-wal", "-shm"):
                Path(f"{self.db_path}{suffix}").unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not delete block store {self.db_path}: {e}") from e
        logger.info("Deleted block store at %s", self.db_path)

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
