"""
Custom exceptions for the identity card scanner.

All application-specific exceptions inherit from IdScanError.
"""

from __future__ import annotations

from typing import Optional, Any


class IdScanError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (for debugging)
        recoverable: Whether the caller can retry (e.g. by re-capturing)
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(IdScanError):
    """
    Invalid or missing configuration.

    Examples:
        - DB_BACKEND=postgres without DB_HOST
        - Unknown capture mode
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details=details, recoverable=False)


class OCRError(IdScanError):
    """
    The OCR engine call itself failed.

    Examples:
        - Tesseract not installed
        - Unreadable image file
        - Language pack missing
    """

    def __init__(
        self,
        message: str,
        image_path: Optional[str] = None,
        languages: Optional[str] = None
    ):
        details = {}
        if image_path:
            details["image_path"] = image_path
        if languages:
            details["languages"] = languages
        super().__init__(message, details=details, recoverable=False)


class TesseractNotFoundError(OCRError):
    """Tesseract OCR is not installed or not accessible."""

    def __init__(self, tesseract_path: Optional[str] = None):
        message = (
            "Tesseract OCR not found. Please install Tesseract:\n"
            "  - Windows: https://github.com/UB-Mannheim/tesseract/wiki\n"
            "  - macOS: brew install tesseract\n"
            "  - Ubuntu: sudo apt install tesseract-ocr"
        )
        super().__init__(message)
        if tesseract_path:
            self.details["tesseract_path_tried"] = tesseract_path


class OCRNoTextError(IdScanError):
    """
    OCR succeeded but returned too little text ("image not clear").

    The capture should be retaken; no fields are produced from it.
    """

    def __init__(self, side: str = "single", text_length: int = 0, min_length: int = 30):
        super().__init__(
            f"Image not clear ({side}): only {text_length} characters recognised",
            details={"side": side, "text_length": text_length, "min_length": min_length},
            recoverable=True,
        )
        self.side = side


class NoDataFoundError(IdScanError):
    """
    OCR produced text but no extraction heuristic matched anything.
    """

    def __init__(self, message: str = "No data found in the scanned document", mode: Optional[str] = None):
        details = {"mode": mode} if mode else None
        super().__init__(message, details=details, recoverable=True)


class ValidationError(IdScanError):
    """
    One or more fields failed their format rule at save time.

    Attributes:
        errors: Mapping of field name to the reason it was rejected
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        message = "; ".join(f"{name}: {reason}" for name, reason in self.errors.items())
        super().__init__(
            f"Validation failed - {message}",
            details={"fields": sorted(self.errors)},
            recoverable=False,
        )

    @property
    def field_names(self) -> list[str]:
        return list(self.errors)


class DuplicateKeyMergeError(IdScanError):
    """
    Saving an edited record would overwrite a different record that already
    holds the same document number (raised only in strict mode).
    """

    def __init__(self, edited_id: int, target_id: int, masked_number: str):
        super().__init__(
            f"Document number {masked_number} already belongs to record {target_id}",
            details={"edited_id": edited_id, "target_id": target_id},
            recoverable=True,
        )
        self.edited_id = edited_id
        self.target_id = target_id


class DataPersistenceError(IdScanError):
    """
    Failed to read or write the record store.

    Examples:
        - Database file not writable
        - PostgreSQL connection refused
    """

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        operation: Optional[str] = None
    ):
        details = {}
        if location:
            details["location"] = location
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details, recoverable=False)
