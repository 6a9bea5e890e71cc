"""
idscan: extract identity card fields from OCR text and keep a deduplicated
record store keyed by document number.
"""

from .extraction import extract, extract_anchored, extract_dual, normalize
from .export import export_all, mask
from .models import FieldSet, IdentityRecord, SaveResult
from .persistence import open_repository
from .services import RecordService

__version__ = "0.1.0"

__all__ = [
    "extract",
    "extract_dual",
    "extract_anchored",
    "normalize",
    "export_all",
    "mask",
    "FieldSet",
    "IdentityRecord",
    "SaveResult",
    "open_repository",
    "RecordService",
]
