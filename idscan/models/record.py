"""
Identity record models.

Represents persisted records and their export projections. Designed to map
one to one onto the `identity_records` table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .fields import FieldSet


@dataclass
class IdentityRecord:
    """
    One stored identity, unique by document number.

    `id` is assigned by the store and stays the same across every later save
    of the same document number.
    """

    id: Optional[int] = None
    document_number: str = ""
    name: str = ""
    date_of_birth: str = ""
    gender: str = ""
    phone_number: str = ""
    address: str = ""
    scanned_at: str = ""  # IST, "DD/MM/YYYY, hh:mm:ss AM"

    @classmethod
    def from_fields(cls, fields: FieldSet, scanned_at: str, record_id: Optional[int] = None) -> "IdentityRecord":
        return cls(
            id=record_id,
            document_number=fields.document_number,
            name=fields.name,
            date_of_birth=fields.date_of_birth,
            gender=fields.gender,
            phone_number=fields.phone_number,
            address=fields.address,
            scanned_at=scanned_at,
        )

    @classmethod
    def from_row(cls, row: Any) -> "IdentityRecord":
        """Build from a mapping-like DB row (sqlite3.Row, RealDictRow, dict)."""
        return cls(
            id=row["id"],
            document_number=row["document_number"] or "",
            name=row["name"] or "",
            date_of_birth=row["date_of_birth"] or "",
            gender=row["gender"] or "",
            phone_number=row["phone_number"] or "",
            address=row["address"] or "",
            scanned_at=row["scanned_at"] or "",
        )

    def to_fields(self) -> FieldSet:
        return FieldSet(
            document_number=self.document_number,
            name=self.name,
            date_of_birth=self.date_of_birth,
            gender=self.gender,
            phone_number=self.phone_number,
            address=self.address,
        )


@dataclass(frozen=True)
class ExportRow:
    """Read-only projection of a record for CSV export."""
    id: Optional[int]
    name: str
    document_number: str  # masked when requested
    date_of_birth: str
    gender: str
    phone_number: str
    address: str
    scanned_at: str


@dataclass(frozen=True)
class SaveResult:
    """
    Outcome of a successful save.

    Attributes:
        record_id: Id of the row that now holds the data
        created: True when a new row was inserted
        merged_from: Id of the edited record when the save was redirected into
            a different row that already held the document number
    """
    record_id: int
    created: bool
    merged_from: Optional[int] = None

    @property
    def merged(self) -> bool:
        return self.merged_from is not None
