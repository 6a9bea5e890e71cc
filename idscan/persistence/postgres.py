"""
PostgreSQL repository implementation.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

import psycopg2
from psycopg2.extras import RealDictCursor

from ..config import DBConfig
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


class PostgresRepository(RecordRepository):
    """
    PostgreSQL repository for identity records.

    Handles:
    - Connection management
    - Schema initialization
    - Upserts keyed by document number
    """

    def __init__(self, config: DBConfig):
        """
        Initialize repository.

        Args:
            config: Database configuration
        """
        self.config = config
        self._conn = None

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(
                    host=self.config.host,
                    port=self.config.port,
                    dbname=self.config.name,
                    user=self.config.user,
                    password=self.config.password,
                    sslmode=self.config.ssl_mode
                )
                self._conn.autocommit = False
            except psycopg2.Error as e:
                logger.error(f"Failed to connect to PostgreSQL: {e}")
                raise DataPersistenceError(
                    f"Cannot connect to PostgreSQL: {e}", location=self.config.host, operation="connect"
                ) from e
        return self._conn

    def init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"""
                    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                        id SERIAL PRIMARY KEY,
                        name TEXT,
                        document_number TEXT UNIQUE,
                        date_of_birth TEXT,
                        address TEXT,
                        gender TEXT,
                        phone_number TEXT,
                        scanned_at TEXT
                    );
                """)
            conn.commit()
            logger.info("Database schema initialized")
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to initialize database: {e}")
            raise DataPersistenceError(f"Schema init failed: {e}", operation="init") from e

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def upsert(self, record: IdentityRecord, guard: Optional[UpsertGuard] = None) -> Tuple[int, bool]:
        """
        Lock the table against other writers, run the guard on the row holding
        the document number, then write.

        SHARE ROW EXCLUSIVE conflicts with itself, so concurrent upserts run
        one at a time and the lookup stays valid until commit. Reads are not
        blocked. `xmax = 0` is true only for a freshly inserted row.
        """
        conn = self._get_connection()
        columns = ", ".join(RECORD_COLUMNS)
        placeholders = ", ".join(["%s"] * len(RECORD_COLUMNS))
        updates = ",\n".join(
            f"{column} = EXCLUDED.{column}" for column in RECORD_COLUMNS if column != "document_number"
        )
        query = f"""
            INSERT INTO {TABLE_NAME} ({columns})
            VALUES ({placeholders})
            ON CONFLICT (document_number) DO UPDATE SET
                {updates}
            RETURNING id, (xmax = 0) AS inserted;
        """

        try:
            with conn.cursor() as cur:
                cur.execute(f"LOCK TABLE {TABLE_NAME} IN SHARE ROW EXCLUSIVE MODE")
                cur.execute(
                    f"SELECT id FROM {TABLE_NAME} WHERE document_number = %s",
                    (record.document_number,),
                )
                row = cur.fetchone()
                existing_id = row[0] if row else None

                if guard is not None:
                    guard(existing_id)

                cur.execute(query, record_values(record))
                record_id, inserted = cur.fetchone()
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to save record: {e}")
            raise DataPersistenceError(f"Upsert failed: {e}", operation="upsert") from e
        except Exception:
            conn.rollback()
            raise

        return record_id, bool(inserted)

    def _fetch(self, query: str, params: tuple = ()) -> List[IdentityRecord]:
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            raise DataPersistenceError(f"Read failed: {e}", operation="read") from e
        return [IdentityRecord.from_row(row) for row in rows]

    def get(self, record_id: int) -> Optional[IdentityRecord]:
        rows = self._fetch(f"SELECT * FROM {TABLE_NAME} WHERE id = %s", (record_id,))
        return rows[0] if rows else None

    def get_by_document_number(self, document_number: str) -> Optional[IdentityRecord]:
        rows = self._fetch(f"SELECT * FROM {TABLE_NAME} WHERE document_number = %s", (document_number,))
        return rows[0] if rows else None

    def list_all(self) -> List[IdentityRecord]:
        return self._fetch(f"SELECT * FROM {TABLE_NAME} ORDER BY id")

    def delete(self, record_id: int) -> bool:
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"DELETE FROM {TABLE_NAME} WHERE id = %s", (record_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            raise DataPersistenceError(f"Delete failed: {e}", operation="delete") from e
        return deleted
