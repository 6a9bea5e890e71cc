"""
Repository pattern for identity record persistence.

Defines the abstract interface shared by the SQLite and PostgreSQL stores.
Both own the same `identity_records` table, unique by document number.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from ..models import IdentityRecord

TABLE_NAME = "identity_records"

# Column order used for inserts and updates
RECORD_COLUMNS = (
    "name",
    "document_number",
    "date_of_birth",
    "address",
    "gender",
    "phone_number",
    "scanned_at",
)

# Called inside the upsert transaction with the id of the row that already
# holds the document number (None when there is none). Raising aborts the
# transaction without writing.
UpsertGuard = Callable[[Optional[int]], None]


def record_values(record: IdentityRecord) -> Tuple[str, ...]:
    return tuple(getattr(record, column) for column in RECORD_COLUMNS)


class RecordRepository(ABC):
    """
    Abstract store for identity records.

    Implementations must run the document-number lookup and the following
    insert/update of `upsert` in a single transaction.
    """

    @abstractmethod
    def init_db(self) -> None:
        """Create the table and indexes if they do not exist."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""

    @abstractmethod
    def upsert(self, record: IdentityRecord, guard: Optional[UpsertGuard] = None) -> Tuple[int, bool]:
        """
        Insert or update by document number.

        Args:
            record: Values to store (`record.id` is ignored)
            guard: Optional check run inside the transaction before writing

        Returns:
            (record id, True if a new row was inserted)
        """

    @abstractmethod
    def get(self, record_id: int) -> Optional[IdentityRecord]:
        """Retrieve a record by id."""

    @abstractmethod
    def get_by_document_number(self, document_number: str) -> Optional[IdentityRecord]:
        """Retrieve a record by its document number."""

    @abstractmethod
    def list_all(self) -> List[IdentityRecord]:
        """All records, oldest id first."""

    @abstractmethod
    def delete(self, record_id: int) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if not found
        """

    def count(self) -> int:
        return len(self.list_all())

    def __enter__(self) -> "RecordRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
