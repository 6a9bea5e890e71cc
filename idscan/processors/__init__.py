"""
Document processors.

- ScanProcessor: OCR one document (single, dual or anchored capture) and
  extract its fields
"""

from .scan import ScanProcessor, describe_fields

__all__ = [
    "ScanProcessor",
    "describe_fields",
]
