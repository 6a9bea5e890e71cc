"""
CSV export with optional masking of document numbers.

Row format:
    ID,Name,Document Number,DOB,Gender,Mobile,Address,Scanned At

Name, Address and Scanned At are always double-quoted (internal quotes
doubled); the remaining columns are written bare unless they contain a
delimiter, quote or line break.

The csv module applies one quoting policy to every column, so it cannot write
this mix of always-quoted and minimally-quoted cells. Cells are quoted here by
the same RFC 4180 rules, and the output reads back with `csv.reader`.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import get_config
from ..logger import get_logger
from ..models import ExportRow, IdentityRecord

logger = get_logger(__name__)

CSV_HEADERS = ["ID", "Name", "Document Number", "DOB", "Gender", "Mobile", "Address", "Scanned At"]

# (attribute, always quoted) in header order
CSV_COLUMNS = [
    ("id", False),
    ("name", True),
    ("document_number", False),
    ("date_of_birth", False),
    ("gender", False),
    ("phone_number", False),
    ("address", True),
    ("scanned_at", True),
]

DOCUMENT_NUMBER_PATTERN = re.compile(r"[0-9]{12}")
MASK_PREFIX = "xxxx-xxxx-"
NEEDS_QUOTES = re.compile(r'[",\r\n]')


def mask(document_number: str) -> str:
    """Keep only the last four digits of a 12-digit number; anything else is returned as is."""
    if document_number and DOCUMENT_NUMBER_PATTERN.fullmatch(document_number):
        return MASK_PREFIX + document_number[-4:]
    return document_number


def to_export_row(record: IdentityRecord, with_masking: bool = False) -> ExportRow:
    return ExportRow(
        id=record.id,
        name=record.name,
        document_number=mask(record.document_number) if with_masking else record.document_number,
        date_of_birth=record.date_of_birth,
        gender=record.gender,
        phone_number=record.phone_number,
        address=record.address,
        scanned_at=record.scanned_at,
    )


def quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def format_cell(value: object, always_quote: bool) -> str:
    text = "" if value is None else str(value)
    if always_quote or NEEDS_QUOTES.search(text):
        return quote(text)
    return text


def serialize_csv(rows: Iterable[ExportRow]) -> str:
    """Header line plus one line per row, joined with newlines."""
    lines = [",".join(CSV_HEADERS)]
    for row in rows:
        lines.append(",".join(
            format_cell(getattr(row, attr), always_quote) for attr, always_quote in CSV_COLUMNS
        ))
    return "\n".join(lines)


def export_all(records: Iterable[IdentityRecord], mask: bool = False) -> str:
    """CSV text for `records`, masking document numbers when asked."""
    rows: List[ExportRow] = [to_export_row(record, with_masking=mask) for record in records]
    return serialize_csv(rows)


def default_export_path(export_dir: Optional[Path] = None) -> Path:
    export_dir = export_dir or get_config().export.export_dir
    return Path(export_dir) / f"AadharRecords_{int(time.time() * 1000)}.csv"


def write_csv(
    records: Iterable[IdentityRecord],
    path: Optional[Path] = None,
    mask: Optional[bool] = None,
) -> Path:
    """
    Write the export to disk.

    Args:
        records: Records to export
        path: Target file (default: timestamped file in the export dir)
        mask: Mask document numbers (default from config)

    Returns:
        Path of the written file
    """
    if mask is None:
        mask = get_config().export.mask_by_default
    records = list(records)
    path = Path(path) if path else default_export_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    path.write_text(export_all(records, mask=mask), encoding="utf-8")
    logger.info(f"Exported {len(records)} record(s) to {path} (masked={mask})")
    return path
