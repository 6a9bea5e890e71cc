"""
OCR engine adapters.

The core only needs `recognize(image) -> str`; TesseractEngine is the default
implementation, backed by pytesseract and Pillow.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import pytesseract
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import OCRConfig, get_config
from ..exceptions import OCRError, TesseractNotFoundError
from ..logger import get_logger

logger = get_logger(__name__)

ImageInput = Union[str, Path, Image.Image]

WINDOWS_TESSERACT_PATH = r"C:\Program Files\Tesseract-OCR\tesseract.exe"

# Assume a single uniform block of text; works well for card layouts
TESSERACT_CONFIG = "--oem 3 --psm 6"


class OCREngine(ABC):
    """Anything that turns an image into a text blob."""

    name: str = "OCREngine"

    @abstractmethod
    def recognize(self, image: ImageInput) -> str:
        """
        Run OCR on one image.

        Raises:
            OCRError: when the engine call itself fails
        """


class TesseractEngine(OCREngine):
    """Tesseract via pytesseract, with light Pillow preprocessing."""

    name = "tesseract"

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or get_config().ocr
        self._initialized = False

    def _initialize(self) -> None:
        """Locate the tesseract binary once."""
        if self._initialized:
            return

        tesseract_path = self.config.tesseract_path
        if not tesseract_path and os.name == "nt" and Path(WINDOWS_TESSERACT_PATH).exists():
            tesseract_path = WINDOWS_TESSERACT_PATH
        if tesseract_path:
            pytesseract.pytesseract.tesseract_cmd = tesseract_path
            logger.info(f"Using Tesseract from: {tesseract_path}")

        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            raise TesseractNotFoundError(tesseract_path or None) from None

        logger.debug(f"Tesseract {version} initialized (languages: {self.config.languages})")
        self._initialized = True

    @staticmethod
    def load_image(image: ImageInput) -> Image.Image:
        if isinstance(image, Image.Image):
            return image
        try:
            with Image.open(image) as img:
                img.load()
                return img.copy()
        except (OSError, UnidentifiedImageError) as e:
            raise OCRError(f"Cannot read image: {e}", image_path=str(image)) from e

    @staticmethod
    def preprocess(img: Image.Image) -> Image.Image:
        """Grayscale + autocontrast; honours EXIF rotation from phone cameras."""
        img = ImageOps.exif_transpose(img)
        return ImageOps.autocontrast(ImageOps.grayscale(img))

    def recognize(self, image: ImageInput) -> str:
        self._initialize()
        img = self.preprocess(self.load_image(image))

        try:
            text = pytesseract.image_to_string(
                img, lang=self.config.languages, config=TESSERACT_CONFIG
            )
        except pytesseract.TesseractError as e:
            raise OCRError(
                f"Tesseract failed: {e}",
                image_path=None if isinstance(image, Image.Image) else str(image),
                languages=self.config.languages,
            ) from e
        return self.to_lines(text)

    @staticmethod
    def to_lines(text: str) -> str:
        """
        One text line per output line: trailing spaces and the blank lines
        Tesseract puts between blocks are dropped.
        """
        lines = (line.strip() for line in text.splitlines())
        return "\n".join(line for line in lines if line)
