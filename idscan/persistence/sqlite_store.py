"""
SQLite repository: the local on-device record store.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..exceptions import DataPersistenceError
from ..logger import get_logger
from ..models import IdentityRecord
from .repository import (
    RECORD_COLUMNS,
    TABLE_NAME,
    RecordRepository,
    UpsertGuard,
    record_values,
)

logger = get_logger(__name__)

SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        document_number TEXT UNIQUE,
        date_of_birth TEXT,
        address TEXT,
        gender TEXT,
        phone_number TEXT,
        scanned_at TEXT
    );
"""


class SQLiteRepository(RecordRepository):
    """
    Record store backed by a single SQLite file.

    The connection runs in autocommit mode; `_transaction` opens explicit
    BEGIN IMMEDIATE transactions so the write lock is held from the
    document-number lookup until commit.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Open (or create) the database file.

        Args:
            path: Database file, or ":memory:"
        """
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self.path, isolation_level=None)
        except sqlite3.Error as e:
            raise DataPersistenceError(f"Cannot open database: {e}", location=self.path, operation="open") from e
        self._conn.row_factory = sqlite3.Row

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Cursor]:
        cur = self._conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield cur
            cur.execute("COMMIT")
        except sqlite3.Error as e:
            if self._conn.in_transaction:
                self._conn.rollback()
            logger.error(f"SQLite {operation} failed: {e}")
            raise DataPersistenceError(f"Database {operation} failed: {e}", location=self.path, operation=operation) from e
        except Exception:
            if self._conn.in_transaction:
                self._conn.rollback()
            raise
        finally:
            cur.close()

    def init_db(self) -> None:
        with self._transaction("init") as cur:
            cur.execute(SCHEMA)
        logger.debug(f"SQLite schema ready at {self.path}")

    def close(self) -> None:
        self._conn.close()

    def upsert(self, record: IdentityRecord, guard: Optional[UpsertGuard] = None) -> Tuple[int, bool]:
        with self._transaction("upsert") as cur:
            cur.execute(
                f"SELECT id FROM {TABLE_NAME} WHERE document_number = ?",
                (record.document_number,),
            )
            row = cur.fetchone()
            existing_id = row["id"] if row else None

            if guard is not None:
                guard(existing_id)

            if existing_id is not None:
                assignments = ", ".join(f"{column} = ?" for column in RECORD_COLUMNS)
                cur.execute(
                    f"UPDATE {TABLE_NAME} SET {assignments} WHERE id = ?",
                    record_values(record) + (existing_id,),
                )
                return existing_id, False

            placeholders = ", ".join("?" for _ in RECORD_COLUMNS)
            cur.execute(
                f"INSERT INTO {TABLE_NAME} ({', '.join(RECORD_COLUMNS)}) VALUES ({placeholders})",
                record_values(record),
            )
            return cur.lastrowid, True

    def _fetch_one(self, where: str, params: tuple) -> Optional[IdentityRecord]:
        try:
            row = self._conn.execute(f"SELECT * FROM {TABLE_NAME} WHERE {where}", params).fetchone()
        except sqlite3.Error as e:
            raise DataPersistenceError(f"Database read failed: {e}", location=self.path, operation="read") from e
        return IdentityRecord.from_row(row) if row else None

    def get(self, record_id: int) -> Optional[IdentityRecord]:
        return self._fetch_one("id = ?", (record_id,))

    def get_by_document_number(self, document_number: str) -> Optional[IdentityRecord]:
        return self._fetch_one("document_number = ?", (document_number,))

    def list_all(self) -> List[IdentityRecord]:
        try:
            rows = self._conn.execute(f"SELECT * FROM {TABLE_NAME} ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise DataPersistenceError(f"Database read failed: {e}", location=self.path, operation="read") from e
        return [IdentityRecord.from_row(row) for row in rows]

    def delete(self, record_id: int) -> bool:
        with self._transaction("delete") as cur:
            cur.execute(f"DELETE FROM {TABLE_NAME} WHERE id = ?", (record_id,))
            return cur.rowcount > 0

    def count(self) -> int:
        return self._conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()[0]
