"""
OCR text normalization.

Strips card boilerplate, collapses whitespace and splits the text into
candidate lines for the field extractors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

# Phrases removed from the text itself
BOILERPLATE_PHRASES = [
    re.compile(r"government of india", re.IGNORECASE),
    re.compile(r"unique identification authority", re.IGNORECASE),
    re.compile(r"भारत सरकार", re.IGNORECASE),
]

# Any line matching one of these is a header, not data
NOISE_LINE_PATTERNS = [
    re.compile(r"gov", re.IGNORECASE),
    re.compile(r"authority", re.IGNORECASE),
    re.compile(r"aadhaar", re.IGNORECASE),
    re.compile(r"भारत", re.IGNORECASE),
]

WHITESPACE_RUN = re.compile(r"\s{2,}")
LINE_BREAK = re.compile(r"\r?\n")


@dataclass
class NormalizedText:
    """Cleaned OCR text and its ordered candidate lines."""
    text: str = ""
    lines: List[str] = field(default_factory=list)


def clean_text(text: Optional[str]) -> str:
    """Remove boilerplate phrases and collapse whitespace runs."""
    if not text:
        return ""

    cleaned = text
    for pattern in BOILERPLATE_PHRASES:
        cleaned = pattern.sub("", cleaned)

    return WHITESPACE_RUN.sub(" ", cleaned).strip()


def is_noise_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in NOISE_LINE_PATTERNS)


def split_lines(text: str) -> List[str]:
    """Split into trimmed, non-empty lines with header noise removed."""
    lines = []
    for raw_line in LINE_BREAK.split(text):
        line = raw_line.strip()
        if line and not is_noise_line(line):
            lines.append(line)
    return lines


def normalize(text: Optional[str]) -> NormalizedText:
    """
    Normalize raw OCR text.

    Never raises: empty or missing input gives empty text and no lines.
    """
    cleaned = clean_text(text)
    if not cleaned:
        return NormalizedText()
    return NormalizedText(text=cleaned, lines=split_lines(cleaned))
