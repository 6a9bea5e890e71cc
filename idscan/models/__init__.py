"""
Data models for the identity card scanner.

These models represent the core data structures and are designed
to be easily serializable and mappable to the record store table.
"""

from .fields import (
    FIELD_NAMES,
    CaptureMode,
    CaptureSide,
    FieldSet,
    RawCapture,
    ScanResult,
)
from .record import ExportRow, IdentityRecord, SaveResult

__all__ = [
    # Extraction models
    "FIELD_NAMES",
    "CaptureMode",
    "CaptureSide",
    "FieldSet",
    "RawCapture",
    "ScanResult",

    # Record models
    "IdentityRecord",
    "ExportRow",
    "SaveResult",
]
