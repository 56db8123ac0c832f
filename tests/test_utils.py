"""Tests for shared utility functions."""

from datetime import datetime, timedelta, timezone

import pytest

from shop_connector.errors import InvalidInputError
from shop_connector.utils import ensure_utc, normalize_phone, parse_instant, to_iso_z


class TestNormalizePhone:
    def test_ten_digits_gets_country_code(self):
        assert normalize_phone("5551234567") == "+15551234567"

    def test_eleven_digits_with_leading_one(self):
        assert normalize_phone("15551234567") == "+15551234567"

    def test_strips_formatting(self):
        assert normalize_phone("(555) 123-4567") == "+15551234567"

    def test_strips_dots_and_spaces(self):
        assert normalize_phone(" 1.555.123.4567 ") == "+15551234567"

    def test_international_keeps_plus(self):
        assert normalize_phone("+44 20 7946 0958") == "+442079460958"

    def test_malformed_is_passed_through(self):
        assert normalize_phone("12345") == "+12345"

    def test_empty_input(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""

    @pytest.mark.parametrize(
        "raw",
        ["5551234567", "1-555-123-4567", "+44 20 7946 0958", "12345", "+1 (555) 123-4567", "abc"],
    )
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once


class TestParseInstant:
    def test_z_suffix(self):
        assert parse_instant("2025-11-25T10:00:00Z", "startDate") == datetime(
            2025, 11, 25, 10, 0, tzinfo=timezone.utc
        )

    def test_milliseconds(self):
        parsed = parse_instant("2025-11-25T10:00:00.000Z", "startDate")
        assert parsed.minute == 0 and parsed.tzinfo is not None

    def test_offset_converted_to_utc(self):
        parsed = parse_instant("2025-11-25T10:00:00-08:00", "startDate")
        assert parsed == datetime(2025, 11, 25, 18, 0, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_read_as_utc(self):
        parsed = parse_instant("2025-11-25T10:00:00", "startDate")
        assert parsed == datetime(2025, 11, 25, 10, 0, tzinfo=timezone.utc)

    def test_missing_value(self):
        with pytest.raises(InvalidInputError, match="startDate"):
            parse_instant("  ", "startDate")

    def test_garbage_value(self):
        with pytest.raises(InvalidInputError, match="ISO 8601"):
            parse_instant("next Tuesday", "startDate")


class TestIsoHelpers:
    def test_to_iso_z(self):
        assert to_iso_z(datetime(2025, 11, 25, 10, 0, tzinfo=timezone.utc)) == "2025-11-25T10:00:00.000Z"

    def test_ensure_utc_converts_offsets(self):
        eastern = timezone(timedelta(hours=-5))
        value = ensure_utc(datetime(2025, 1, 1, 9, 0, tzinfo=eastern))
        assert value.hour == 14 and value.tzinfo == timezone.utc
