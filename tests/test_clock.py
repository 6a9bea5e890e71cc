from datetime import datetime, timezone

import pytest

from idscan.utils import IST, format_timestamp, parse_timestamp


@pytest.mark.parametrize("moment, expected", [
    (datetime(2026, 10, 18, 0, 30, tzinfo=IST), "18/10/2026, 12:30:00 AM"),
    (datetime(2026, 10, 18, 12, 5, tzinfo=IST), "18/10/2026, 12:05:00 PM"),
    (datetime(2026, 10, 18, 15, 4, 5, tzinfo=IST), "18/10/2026, 03:04:05 PM"),
    (datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc), "18/10/2026, 09:30:00 AM"),
])
def test_format_timestamp(moment, expected):
    assert format_timestamp(moment) == expected


def test_parse_reads_back_formatted_value():
    moment = datetime(2026, 1, 2, 23, 59, 58, tzinfo=IST)

    parsed = parse_timestamp(format_timestamp(moment))

    assert parsed == moment
    assert parsed.tzinfo is IST


def test_parse_midnight_and_noon():
    assert parse_timestamp("18/10/2026, 12:00:00 AM").hour == 0
    assert parse_timestamp("18/10/2026, 12:00:00 PM").hour == 12


@pytest.mark.parametrize("value", [
    "",
    "garbage",
    "2026-10-18 10:00:00",
    "18/10/2026, 13:00:00 PM",
    "18/10/2026, 00:15:00 AM",
    "31/02/2026, 10:00:00 AM",
    "18/10/2026, 10:00:00 am",
    None,
])
def test_parse_rejects_malformed(value):
    assert parse_timestamp(value) is None


def test_parsed_timestamps_order_chronologically():
    values = [
        "18/10/2026, 01:00:00 PM",
        "18/10/2026, 11:59:59 AM",
        "17/10/2026, 11:00:00 PM",
    ]
    assert sorted(values, key=parse_timestamp) == list(reversed(values))
