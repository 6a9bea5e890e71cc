"""
Application services.
"""

from .reconcile import RecordService, canonical_fields, validate_fields

__all__ = [
    "RecordService",
    "canonical_fields",
    "validate_fields",
]
