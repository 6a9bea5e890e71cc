"""
OCR engine adapters.
"""

from .engine import ImageInput, OCREngine, TesseractEngine

__all__ = [
    "ImageInput",
    "OCREngine",
    "TesseractEngine",
]
