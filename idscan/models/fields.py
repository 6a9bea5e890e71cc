"""
Extraction data models.

Represents raw OCR captures and the partially populated field set
produced by the extraction heuristics.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from typing import Any, Optional


class CaptureSide(str, Enum):
    """Which image of the card a text blob came from."""
    FRONT = "front"
    BACK = "back"
    SINGLE = "single"


class CaptureMode(str, Enum):
    """How a document was captured, selecting the extraction strategy."""
    SINGLE = "single"
    DUAL = "dual"
    ANCHORED = "anchored"


@dataclass
class RawCapture:
    """OCR text from one image. Never persisted."""
    side: CaptureSide
    text: str = ""
    source: str = ""  # image path or other handle, for logging only

    @property
    def text_length(self) -> int:
        return len(self.text.strip())


FIELD_NAMES = (
    "document_number",
    "name",
    "date_of_birth",
    "gender",
    "phone_number",
    "address",
)


@dataclass
class FieldSet:
    """
    Structured result of running the extraction heuristics over OCR text.

    Every attribute defaults to an empty string; extraction degrades to
    empty fields instead of failing.
    """

    document_number: str = ""  # digits only, no separators
    name: str = ""
    date_of_birth: str = ""  # DD/MM/YYYY, DD-MM-YYYY or a bare year
    gender: str = ""  # Male, Female or empty
    phone_number: str = ""
    address: str = ""  # line fragments joined with ", "

    def __post_init__(self):
        for name in FIELD_NAMES:
            value = getattr(self, name)
            setattr(self, name, "" if value is None else str(value).strip())

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in FIELD_NAMES)

    def with_address(self, address: str) -> "FieldSet":
        """Copy of this field set with the address replaced."""
        return replace(self, address=address)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class ScanResult:
    """Outcome of running one capture mode end to end."""
    fields: FieldSet
    mode: CaptureMode
    captures: list[RawCapture] = field(default_factory=list)

    # Side whose capture failed and should be retaken, if any
    needs_recapture: Optional[CaptureSide] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.needs_recapture is None
