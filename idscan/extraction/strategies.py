"""
Extraction strategies, one per capture mode.

- SimpleCardStrategy: one image of the card front, keyword-labelled fields
- DualSidedStrategy: front image for everything but the address, back image
  for the address
- AnchoredLetterStrategy: one image of the letter-style layout, name and
  address located by position below the "To" salutation
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..config import get_config
from ..exceptions import ConfigurationError, NoDataFoundError
from ..logger import get_logger
from ..models import CaptureMode, CaptureSide, FieldSet, RawCapture
from .fields import (
    ADDRESS_MAX_LINES,
    ADDRESS_SEPARATOR,
    DOB_LABEL_PATTERN,
    FULL_DATE_PATTERN,
    extract_date_of_birth,
    extract_fields,
    find_document_number,
    find_gender,
    find_phone_number,
)
from .normalizer import normalize

logger = get_logger(__name__)

SALUTATION_PATTERN = re.compile(r"\bTo\b")
POSTAL_CODE_PATTERN = re.compile(r"\b[0-9]{6}\b")


class ExtractionStrategy(ABC):
    """
    Turns the OCR text of one capture mode into a FieldSet.

    Subclasses declare which capture sides they expect, in order.
    """

    mode: CaptureMode
    sides: tuple[CaptureSide, ...] = (CaptureSide.SINGLE,)

    def __init__(self, min_text_length: Optional[int] = None):
        if min_text_length is None:
            min_text_length = get_config().ocr.min_text_length
        self.min_text_length = min_text_length

    def check_captures(self, captures: Sequence[RawCapture]) -> None:
        if len(captures) != len(self.sides):
            raise ValueError(
                f"{self.mode.value} extraction expects {len(self.sides)} capture(s), "
                f"got {len(captures)}"
            )

    def is_readable(self, capture: RawCapture) -> bool:
        """Whether a capture has enough text to be worth parsing."""
        return capture.text_length >= self.min_text_length

    @abstractmethod
    def extract(self, captures: Sequence[RawCapture]) -> FieldSet:
        """
        Extract fields from the captures of one document.

        Args:
            captures: OCR text per image, in the order given by `sides`

        Returns:
            Extracted fields (missing values left empty)
        """


class SimpleCardStrategy(ExtractionStrategy):
    """Keyword-labelled extraction over a single image."""

    mode = CaptureMode.SINGLE

    def extract(self, captures: Sequence[RawCapture]) -> FieldSet:
        self.check_captures(captures)
        return extract_fields(captures[0].text)


class DualSidedStrategy(ExtractionStrategy):
    """Front image for identity fields, back image for the address."""

    mode = CaptureMode.DUAL
    sides = (CaptureSide.FRONT, CaptureSide.BACK)

    def extract(self, captures: Sequence[RawCapture]) -> FieldSet:
        self.check_captures(captures)
        front, back = captures
        return self.merge(extract_fields(front.text), back)

    def merge(self, front_fields: FieldSet, back: RawCapture) -> FieldSet:
        """
        Override the front address with the back capture's address.

        A back capture below the minimal text length aborts the merge and the
        front fields are returned untouched.
        """
        if not self.is_readable(back):
            logger.warning(
                f"Back capture too short ({back.text_length} chars), keeping front fields"
            )
            return front_fields

        back_fields = extract_fields(back.text)
        return front_fields.with_address(back_fields.address)


class AnchoredLetterStrategy(ExtractionStrategy):
    """
    Positional extraction for the letter-style layout.

    The name is the line right after the "To" salutation; the address runs
    from the next line up to and including the first line with a 6-digit
    postal code.
    """

    mode = CaptureMode.ANCHORED

    def extract(self, captures: Sequence[RawCapture]) -> FieldSet:
        self.check_captures(captures)
        text = captures[0].text
        normalized = normalize(text)
        lines = normalized.lines

        name = ""
        address_lines: List[str] = []
        anchor = self.find_anchor(lines)
        if anchor is None:
            logger.debug("No salutation line found, name and address left empty")
        else:
            following = lines[anchor + 1:]
            if following:
                name = following[0]
                address_lines = self.collect_address(following[1:])

        fields = FieldSet(
            document_number=find_document_number(text),
            name=name,
            date_of_birth=self.find_date_of_birth(text),
            gender=find_gender(text),
            phone_number=find_phone_number(text),
            address=ADDRESS_SEPARATOR.join(address_lines),
        )

        if not any((fields.document_number, fields.name, fields.date_of_birth, fields.address)):
            raise NoDataFoundError(mode=self.mode.value)
        return fields

    @staticmethod
    def find_anchor(lines: List[str]) -> Optional[int]:
        for index, line in enumerate(lines):
            if SALUTATION_PATTERN.search(line):
                return index
        return None

    @staticmethod
    def collect_address(lines: List[str]) -> List[str]:
        """Lines up to the postal code line; capped when no postal code shows up."""
        collected = []
        for line in lines:
            collected.append(line)
            if POSTAL_CODE_PATTERN.search(line):
                return collected
        return collected[:ADDRESS_MAX_LINES]

    @staticmethod
    def find_date_of_birth(text: str) -> str:
        """Labelled DOB line first, otherwise the first full date anywhere."""
        normalized = normalize(text)
        if any(DOB_LABEL_PATTERN.search(line) for line in normalized.lines):
            return extract_date_of_birth(normalized)
        match = FULL_DATE_PATTERN.search(normalized.text)
        return match.group(0) if match else ""


STRATEGIES: dict[CaptureMode, type[ExtractionStrategy]] = {
    CaptureMode.SINGLE: SimpleCardStrategy,
    CaptureMode.DUAL: DualSidedStrategy,
    CaptureMode.ANCHORED: AnchoredLetterStrategy,
}


def get_strategy(mode: CaptureMode | str, min_text_length: Optional[int] = None) -> ExtractionStrategy:
    """Strategy instance for a capture mode name or enum."""
    try:
        mode = CaptureMode(mode)
    except ValueError:
        raise ConfigurationError(f"Unknown capture mode: {mode}", config_key="mode") from None
    return STRATEGIES[mode](min_text_length=min_text_length)


def extract(text: Optional[str]) -> FieldSet:
    """Single-image extraction."""
    return SimpleCardStrategy().extract([RawCapture(CaptureSide.SINGLE, text or "")])


def extract_dual(front_text: Optional[str], back_text: Optional[str]) -> FieldSet:
    """Front/back extraction with the back address merged in."""
    return DualSidedStrategy().extract([
        RawCapture(CaptureSide.FRONT, front_text or ""),
        RawCapture(CaptureSide.BACK, back_text or ""),
    ])


def extract_anchored(text: Optional[str]) -> FieldSet:
    """Letter-layout extraction; raises NoDataFoundError when nothing matched."""
    return AnchoredLetterStrategy().extract([RawCapture(CaptureSide.SINGLE, text or "")])
