"""
Scan processor: image(s) -> OCR -> extraction strategy -> FieldSet.

Captures are always processed strictly in order; for dual capture the back
image is not touched until the front has been recognised and found readable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from ..config import Config, get_config
from ..exceptions import ConfigurationError, IdScanError, OCRError, OCRNoTextError
from ..extraction.fields import extract_fields
from ..extraction.strategies import (
    AnchoredLetterStrategy,
    DualSidedStrategy,
    SimpleCardStrategy,
)
from ..export.csv_export import mask
from ..logger import get_logger
from ..models import CaptureMode, CaptureSide, FieldSet, RawCapture, ScanResult
from ..ocr import ImageInput, OCREngine, TesseractEngine
from ..utils.timing import StepTimer


def describe_fields(fields: FieldSet) -> str:
    """Log-safe summary of what was extracted."""
    found = [name for name, value in fields.to_dict().items() if value]
    number = mask(fields.document_number) if fields.document_number else "-"
    return f"document={number} found=[{', '.join(found)}]"


class ScanProcessor:
    """
    Runs OCR and extraction for one document.

    Provides:
    - Sequential capture handling per capture mode
    - Minimal text length checks ("image not clear")
    - Timing instrumentation and consistent logging
    """

    name: str = "ScanProcessor"

    def __init__(self, engine: Optional[OCREngine] = None, config: Optional[Config] = None):
        self.config = config or get_config()
        self.engine = engine or TesseractEngine(self.config.ocr)
        self.logger = get_logger(self.name)
        self.timer = StepTimer()

        min_length = self.config.ocr.min_text_length
        self.single = SimpleCardStrategy(min_text_length=min_length)
        self.dual = DualSidedStrategy(min_text_length=min_length)
        self.anchored = AnchoredLetterStrategy(min_text_length=min_length)

    def log_info(self, message: str, **kwargs: Any) -> None:
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.info(f"{message} {extra}".strip())

    def log_warning(self, message: str, **kwargs: Any) -> None:
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.warning(f"{message} {extra}".strip())

    def capture(self, side: CaptureSide, image: ImageInput) -> RawCapture:
        """OCR one image. Engine failures surface as OCRError."""
        source = str(image) if isinstance(image, (str, Path)) else "<image>"

        try:
            with self.timer.step(f"ocr:{side.value}", self.logger):
                text = self.engine.recognize(image) or ""
        except IdScanError:
            raise
        except Exception as e:
            raise OCRError(f"OCR engine failed: {e}", image_path=source) from e

        capture = RawCapture(side=side, text=text, source=source)
        if self.config.log_raw_ocr:
            self.logger.debug(f"Raw OCR ({side.value}, {capture.text_length} chars):\n{text}")
        return capture

    def require_text(self, capture: RawCapture) -> RawCapture:
        """Raise OCRNoTextError when a capture is too short to parse."""
        min_length = self.config.ocr.min_text_length
        if capture.text_length < min_length:
            self.log_warning("Image not clear", side=capture.side.value, chars=capture.text_length)
            raise OCRNoTextError(capture.side.value, capture.text_length, min_length)
        return capture

    def scan_single(self, image: ImageInput) -> ScanResult:
        capture = self.require_text(self.capture(CaptureSide.SINGLE, image))
        fields = self.single.extract([capture])
        self.log_info("Single capture extracted", fields=describe_fields(fields))
        return ScanResult(fields=fields, mode=CaptureMode.SINGLE, captures=[capture])

    def scan_dual(self, front_image: ImageInput, back_image: ImageInput) -> ScanResult:
        """
        Front then back. An unreadable front raises OCRNoTextError before the
        back is captured; an unreadable back keeps the front fields and asks
        for the back to be retaken.
        """
        front = self.require_text(self.capture(CaptureSide.FRONT, front_image))
        front_fields = extract_fields(front.text)
        self.log_info("Front capture extracted", fields=describe_fields(front_fields))

        back = self.capture(CaptureSide.BACK, back_image)
        return self._merge_back(front_fields, [front], back)

    def recapture_back(self, previous: ScanResult, back_image: ImageInput) -> ScanResult:
        """Retry only the back side of an earlier dual scan."""
        if previous.mode is not CaptureMode.DUAL:
            raise ConfigurationError("Only dual captures have a back side to retake", config_key="mode")
        fronts = [c for c in previous.captures if c.side is CaptureSide.FRONT]
        back = self.capture(CaptureSide.BACK, back_image)
        return self._merge_back(previous.fields, fronts, back)

    def _merge_back(self, front_fields: FieldSet, fronts: list[RawCapture], back: RawCapture) -> ScanResult:
        captures = fronts + [back]
        if not self.dual.is_readable(back):
            message = f"Back image not clear ({back.text_length} chars), please retake it"
            self.log_warning(message)
            return ScanResult(
                fields=front_fields,
                mode=CaptureMode.DUAL,
                captures=captures,
                needs_recapture=CaptureSide.BACK,
                warnings=[message],
            )

        fields = self.dual.merge(front_fields, back)
        self.log_info("Dual capture merged", fields=describe_fields(fields))
        return ScanResult(fields=fields, mode=CaptureMode.DUAL, captures=captures)

    def scan_anchored(self, image: ImageInput) -> ScanResult:
        """Letter layout; raises NoDataFoundError when nothing matched."""
        capture = self.require_text(self.capture(CaptureSide.SINGLE, image))
        fields = self.anchored.extract([capture])
        self.log_info("Anchored capture extracted", fields=describe_fields(fields))
        return ScanResult(fields=fields, mode=CaptureMode.ANCHORED, captures=[capture])

    def scan(self, mode: CaptureMode | str, images: Sequence[ImageInput]) -> ScanResult:
        """Dispatch on capture mode."""
        try:
            mode = CaptureMode(mode)
        except ValueError:
            raise ConfigurationError(f"Unknown capture mode: {mode}", config_key="mode") from None

        expected = 2 if mode is CaptureMode.DUAL else 1
        if len(images) != expected:
            raise ConfigurationError(
                f"{mode.value} capture needs {expected} image(s), got {len(images)}",
                config_key="images",
            )

        self.timer.reset()
        if mode is CaptureMode.DUAL:
            result = self.scan_dual(images[0], images[1])
        elif mode is CaptureMode.ANCHORED:
            result = self.scan_anchored(images[0])
        else:
            result = self.scan_single(images[0])

        self.logger.debug(self.timer.summary())
        return result
