"""
Record export.
"""

from .csv_export import (
    CSV_HEADERS,
    export_all,
    mask,
    serialize_csv,
    to_export_row,
    write_csv,
)

__all__ = [
    "CSV_HEADERS",
    "export_all",
    "mask",
    "serialize_csv",
    "to_export_row",
    "write_csv",
]
