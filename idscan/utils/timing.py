"""
Step timings for the scan pipeline.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


@dataclass
class StepTiming:
    """Wall time of one pipeline step (an OCR call, usually)."""
    step: str
    seconds: float = 0.0
    failed: bool = False

    def __str__(self) -> str:
        shown = f"{self.seconds * 1000:.0f}ms" if self.seconds < 1 else f"{self.seconds:.2f}s"
        return f"{self.step} {shown}{' (failed)' if self.failed else ''}"


@contextmanager
def timed_step(step: str, logger: Optional[logging.Logger] = None) -> Iterator[StepTiming]:
    """
    Time the body of a `with` block.

    Usage:
        with timed_step("ocr:front", logger) as timing:
            text = engine.recognize(path)
        print(timing.seconds)
    """
    timing = StepTiming(step=step)
    started = time.perf_counter()
    try:
        yield timing
    except Exception:
        timing.failed = True
        raise
    finally:
        timing.seconds = time.perf_counter() - started
        if logger is not None:
            logger.debug(str(timing))


class StepTimer:
    """Collects the step timings of one scan, in the order they ran."""

    def __init__(self):
        self.steps: List[StepTiming] = []

    def reset(self) -> None:
        self.steps = []

    @contextmanager
    def step(self, name: str, logger: Optional[logging.Logger] = None) -> Iterator[StepTiming]:
        with timed_step(name, logger) as timing:
            self.steps.append(timing)
            yield timing

    @property
    def total(self) -> float:
        return sum(t.seconds for t in self.steps)

    def as_dict(self) -> Dict[str, float]:
        return {t.step: round(t.seconds, 3) for t in self.steps}

    def summary(self) -> str:
        if not self.steps:
            return "No steps timed"
        return f"{', '.join(str(t) for t in self.steps)} (total {self.total:.2f}s)"
