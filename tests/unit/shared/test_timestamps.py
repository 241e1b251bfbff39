"""
Tests for timestamp helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.shared.utils.timestamps import parse_timestamp, to_iso, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo == timezone.utc


def test_to_iso_passes_none_through():
    assert to_iso(None) is None


def test_to_iso_normalizes_to_utc_microseconds():
    plus_two = timezone(timedelta(hours=2))

    assert to_iso(datetime(2024, 6, 10, 14, 0, tzinfo=plus_two)) == "2024-06-10T12:00:00.000000+00:00"
    assert to_iso(datetime(2024, 6, 10, 12, 0)) == "2024-06-10T12:00:00.000000+00:00"


def test_iso_strings_sort_chronologically():
    """Test that fixed-width output orders like the datetimes it encodes."""
    base = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
    values = [base + timedelta(microseconds=1), base, base + timedelta(seconds=1)]

    assert sorted(to_iso(v) for v in values) == [to_iso(v) for v in sorted(values)]


@pytest.mark.parametrize(
    "raw",
    ["2024-06-10T12:00:00Z", "2024-06-10T12:00:00+00:00", "2024-06-10T12:00:00"],
)
def test_parse_timestamp_accepts_iso_strings(raw):
    assert parse_timestamp(raw) == datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def test_parse_timestamp_passes_datetimes_and_none():
    moment = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)

    assert parse_timestamp(moment) is moment
    assert parse_timestamp(None) is None


def test_parse_timestamp_rejects_other_types():
    with pytest.raises(TypeError):
        parse_timestamp(1718020800)
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")
