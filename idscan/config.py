"""
Centralized configuration management.

Configuration is loaded from:
1. Environment variables
2. .env file (if present)
3. Default values

Usage:
    from idscan.config import get_config
    config = get_config()
    print(config.debug)  # True if DEBUG=1 in environment
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env on module import; existing environment variables win
load_dotenv(override=False)


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class OCRConfig:
    """OCR (Tesseract) configuration."""
    languages: str = field(default_factory=lambda: os.getenv("OCR_LANGUAGES", "eng+hin"))
    tesseract_path: str = field(default_factory=lambda: os.getenv("TESSERACT_PATH", ""))

    # Captures with less text than this are treated as "image not clear"
    min_text_length: int = field(default_factory=lambda: _get_int_env("OCR_MIN_TEXT_LENGTH", 30))


@dataclass
class DBConfig:
    """Record store configuration (SQLite locally, PostgreSQL optionally)."""
    backend: str = field(default_factory=lambda: os.getenv("DB_BACKEND", "sqlite").strip().lower())
    sqlite_path: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["SQLITE_PATH"]) if os.getenv("SQLITE_PATH") else None
    )

    host: str = field(default_factory=lambda: os.getenv("DB_HOST", ""))
    port: int = field(default_factory=lambda: _get_int_env("DB_PORT", 5432))
    name: str = field(default_factory=lambda: os.getenv("DB_NAME", ""))
    user: str = field(default_factory=lambda: os.getenv("DB_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("DB_PASSWORD", ""))
    ssl_mode: str = field(default_factory=lambda: os.getenv("DB_SSL_MODE", "prefer"))

    @property
    def is_postgres(self) -> bool:
        return self.backend in ("postgres", "postgresql")

    @property
    def is_configured(self) -> bool:
        """Check if minimal PostgreSQL config is present."""
        return bool(self.host and self.name and self.user)


@dataclass
class ExportConfig:
    """CSV export configuration."""
    export_dir: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["EXPORT_DIR"]) if os.getenv("EXPORT_DIR") else None
    )
    mask_by_default: bool = field(default_factory=lambda: _get_bool_env("EXPORT_MASK", False))


@dataclass
class Config:
    """
    Main application configuration.

    All settings are loaded from environment variables with sensible defaults.
    Set DEBUG=1 in environment to enable debug mode.
    """

    # Base directory (current working directory by default)
    base_dir: Path = field(default_factory=lambda: Path(os.getenv("IDSCAN_HOME", ".")).resolve())

    data_dir: Path = field(default=None)
    logs_dir: Path = field(default=None)

    # Debug mode (enables verbose logging and raw OCR text in logs)
    debug: bool = field(default_factory=lambda: _get_bool_env("DEBUG", False))
    log_to_file: bool = field(default_factory=lambda: _get_bool_env("LOG_TO_FILE", True))

    # Raise instead of silently merging an edit into another record's row
    strict_duplicate_keys: bool = field(
        default_factory=lambda: _get_bool_env("STRICT_DUPLICATE_KEYS", False)
    )

    # Sub-configurations
    ocr: OCRConfig = field(default_factory=OCRConfig)
    db: DBConfig = field(default_factory=DBConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    def __post_init__(self):
        """Resolve paths after initialization."""
        if self.data_dir is None:
            self.data_dir = self.base_dir / os.getenv("DATA_DIR", "data")
        if self.logs_dir is None:
            self.logs_dir = self.base_dir / os.getenv("LOG_DIR", "logs")
        if self.db.sqlite_path is None:
            self.db.sqlite_path = self.data_dir / "AadharDB.db"
        if self.export.export_dir is None:
            self.export.export_dir = self.data_dir / "exports"

    @property
    def log_raw_ocr(self) -> bool:
        """Whether raw OCR text may be written to the debug log."""
        return self.debug or _get_bool_env("LOG_RAW_OCR", False)


# Global config instance (lazily initialized)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
