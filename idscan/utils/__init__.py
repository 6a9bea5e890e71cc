"""
Utility functions for the identity card scanner.
"""

from .clock import (
    IST,
    TIMESTAMP_PATTERN,
    format_timestamp,
    now_ist,
    parse_timestamp,
    today_ist,
)

from .timing import (
    StepTimer,
    StepTiming,
    timed_step,
)

__all__ = [
    # Clock utilities
    "IST",
    "TIMESTAMP_PATTERN",
    "format_timestamp",
    "now_ist",
    "parse_timestamp",
    "today_ist",

    # Timing utilities
    "StepTimer",
    "StepTiming",
    "timed_step",
]
