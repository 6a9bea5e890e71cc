"""
Field extraction from identity card OCR text.
"""

from .normalizer import NormalizedText, normalize
from .fields import extract_fields
from .strategies import (
    AnchoredLetterStrategy,
    DualSidedStrategy,
    ExtractionStrategy,
    SimpleCardStrategy,
    extract,
    extract_anchored,
    extract_dual,
    get_strategy,
)

__all__ = [
    "NormalizedText",
    "normalize",
    "extract_fields",
    "ExtractionStrategy",
    "SimpleCardStrategy",
    "DualSidedStrategy",
    "AnchoredLetterStrategy",
    "get_strategy",
    "extract",
    "extract_dual",
    "extract_anchored",
]
