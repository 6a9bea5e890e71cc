"""
Field extractors for identity card OCR text.

Each extractor is a pure function of the normalized text and its candidate
lines, returning the extracted value or an empty string. Extractors never
raise and never depend on each other.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..models import FieldSet
from .normalizer import NormalizedText, normalize

# 12 digits, optionally grouped 4-4-4
DOCUMENT_NUMBER_PATTERN = re.compile(r"\b[0-9]{4}\s?[0-9]{4}\s?[0-9]{4}\b")

DOB_LABEL_PATTERN = re.compile(r"DOB|Date of Birth", re.IGNORECASE)
FULL_DATE_PATTERN = re.compile(r"[0-9]{2}[/-][0-9]{2}[/-][0-9]{4}")
YEAR_PATTERN = re.compile(r"\b[0-9]{4}\b")

FEMALE_WORD = re.compile(r"\bfemale\b", re.IGNORECASE)
MALE_WORD = re.compile(r"\bmale\b", re.IGNORECASE)

# Indian mobile numbers start with 6-9
PHONE_PATTERN = re.compile(r"\b[6-9][0-9]{9}\b")

NAME_LINE_PATTERN = re.compile(r"[A-Za-z ]+")
NAME_EXCLUDE_PATTERN = re.compile(
    r"DOB|Year|Gender|Address|Father|Mother|Wife|Husband", re.IGNORECASE
)

ADDRESS_LABEL_PATTERN = re.compile(r"address", re.IGNORECASE)
ADDRESS_NOISE_PATTERN = re.compile(r"www\.|http|help|mailto", re.IGNORECASE)
ADDRESS_MAX_LINES = 5
ADDRESS_SEPARATOR = ", "


def find_document_number(text: str) -> str:
    """First 12-digit number in `text` with separators stripped."""
    match = DOCUMENT_NUMBER_PATTERN.search(text or "")
    if not match:
        return ""
    return re.sub(r"\s", "", match.group(0))


def find_phone_number(text: str) -> str:
    match = PHONE_PATTERN.search(text or "")
    return match.group(0) if match else ""


def find_gender(text: str) -> str:
    """
    Classify gender from free text.

    "female" is always tested before "male", since "male" is a substring of
    "female". Whole words are preferred; bare substrings are a fallback for
    OCR output that glues words together.
    """
    if not text:
        return ""
    if FEMALE_WORD.search(text):
        return "Female"
    if MALE_WORD.search(text):
        return "Male"

    lowered = text.lower()
    if "female" in lowered:
        return "Female"
    if "male" in lowered:
        return "Male"
    return ""


def find_date_in_line(line: str) -> str:
    """Full DD/MM/YYYY or DD-MM-YYYY date in a line, else a bare year."""
    date_match = FULL_DATE_PATTERN.search(line)
    if date_match:
        return date_match.group(0)
    year_match = YEAR_PATTERN.search(line)
    return year_match.group(0) if year_match else ""


def find_labelled_line(lines: List[str], pattern: re.Pattern) -> Optional[int]:
    """Index of the first line matching `pattern`, or None."""
    for index, line in enumerate(lines):
        if pattern.search(line):
            return index
    return None


def extract_document_number(normalized: NormalizedText) -> str:
    return find_document_number(normalized.text)


def extract_date_of_birth(normalized: NormalizedText) -> str:
    """Date of birth from the first DOB-labelled line only."""
    index = find_labelled_line(normalized.lines, DOB_LABEL_PATTERN)
    if index is None:
        return ""
    return find_date_in_line(normalized.lines[index])


def extract_gender(normalized: NormalizedText) -> str:
    return find_gender(normalized.text)


def extract_phone_number(normalized: NormalizedText) -> str:
    return find_phone_number(normalized.text)


def extract_name(normalized: NormalizedText) -> str:
    """First all-letters line that is not a field label."""
    for line in normalized.lines:
        if not NAME_LINE_PATTERN.fullmatch(line):
            continue
        if NAME_EXCLUDE_PATTERN.search(line):
            continue
        return line.strip()
    return ""


def extract_address(normalized: NormalizedText) -> str:
    """Up to five lines after the first "address" line, minus web/help noise."""
    lines = normalized.lines
    index = find_labelled_line(lines, ADDRESS_LABEL_PATTERN)
    if index is None:
        return ""

    candidates = lines[index + 1:index + 1 + ADDRESS_MAX_LINES]
    kept = [line for line in candidates if not ADDRESS_NOISE_PATTERN.search(line)]
    return ADDRESS_SEPARATOR.join(kept).strip()


def extract_from_normalized(normalized: NormalizedText) -> FieldSet:
    """Run every extractor over already-normalized text."""
    return FieldSet(
        document_number=extract_document_number(normalized),
        name=extract_name(normalized),
        date_of_birth=extract_date_of_birth(normalized),
        gender=extract_gender(normalized),
        phone_number=extract_phone_number(normalized),
        address=extract_address(normalized),
    )


def extract_fields(text: Optional[str]) -> FieldSet:
    """Normalize raw OCR text and extract every field from it."""
    return extract_from_normalized(normalize(text))
