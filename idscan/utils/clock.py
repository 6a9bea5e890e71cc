"""
Indian Standard Time helpers for record timestamps.

Timestamps look like "18/10/2026, 03:04:05 PM". The AM/PM marker is written
and read here rather than through `%p`, which follows the process locale.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

IST = timezone(timedelta(hours=5, minutes=30), name="IST")

TIMESTAMP_PATTERN = re.compile(r"(\d{2})/(\d{2})/(\d{4}), (\d{2}):(\d{2}):(\d{2}) (AM|PM)")

Clock = Callable[[], datetime]


def now_ist() -> datetime:
    """Current time in IST."""
    return datetime.now(IST)


def today_ist(clock: Optional[Clock] = None) -> date:
    return (clock or now_ist)().astimezone(IST).date()


def format_timestamp(moment: datetime) -> str:
    """Format an aware datetime as an IST record timestamp."""
    local = moment.astimezone(IST)
    marker = "AM" if local.hour < 12 else "PM"
    return f"{local:%d/%m/%Y, %I:%M:%S} {marker}"


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse a stored record timestamp; None when it is not in the expected format."""
    match = TIMESTAMP_PATTERN.fullmatch(value.strip()) if isinstance(value, str) else None
    if not match:
        return None

    day, month, year, hour, minute, second = (int(part) for part in match.groups()[:6])
    if not 1 <= hour <= 12:
        return None
    hour = hour % 12 + (12 if match.group(7) == "PM" else 0)

    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=IST)
    except ValueError:
        return None
