"""Tests for duration parsing."""

from datetime import datetime, timedelta

import pytest

from pullpanda.utils.duration import (
    DurationFormatError,
    InvalidDurationFormat,
    InvalidDurationUnit,
    parse_duration,
    resolve_start_date,
)


class TestParseDuration:
    """Test parse_duration."""

    @pytest.mark.parametrize(
        "unit, seconds",
        [("s", 1), ("m", 60), ("h", 3600), ("d", 86400), ("w", 604800), ("mo", 2592000)],
    )
    @pytest.mark.parametrize("value", [1, 5, 12])
    def test_units(self, value, unit, seconds):
        """Every unit multiplies the value by its length in seconds."""
        assert parse_duration(f"{value}{unit}") == timedelta(seconds=value * seconds)

    def test_months_are_not_minutes(self):
        """5mo is five 30-day months, not five minutes."""
        assert parse_duration("5mo") == timedelta(days=150)
        assert parse_duration("5m") == timedelta(minutes=5)

    def test_multi_digit_months(self):
        assert parse_duration("12mo") == timedelta(days=360)

    def test_zero(self):
        assert parse_duration("0d") == timedelta(0)

    @pytest.mark.parametrize("token", ["", "5", "abc d", "d", "-d", "mo", "1.5h", " 5d"])
    def test_invalid_format(self, token):
        """Short tokens and non-integer values are format errors."""
        with pytest.raises(InvalidDurationFormat):
            parse_duration(token)

    @pytest.mark.parametrize("token", ["5x", "5y", "9q", "3D"])
    def test_invalid_unit(self, token):
        """Unknown units are unit errors."""
        with pytest.raises(InvalidDurationUnit):
            parse_duration(token)

    @pytest.mark.parametrize("token", ["99999999999999d", "1000000000w", "9" * 40 + "s"])
    def test_span_too_large(self, token):
        """Well-formed tokens beyond the largest time span are format errors."""
        with pytest.raises(InvalidDurationFormat, match="too large"):
            parse_duration(token)

    @pytest.mark.parametrize("token", ["", "5", "abc d", "5x"])
    def test_errors_share_base_class(self, token):
        with pytest.raises(DurationFormatError):
            parse_duration(token)


class TestResolveStartDate:
    """Test resolve_start_date."""

    def test_no_inputs(self):
        assert resolve_start_date() is None

    def test_explicit_start_date(self):
        assert resolve_start_date("2024-01-15") == "2024-01-15"

    def test_duration_overrides_start_date(self):
        now = datetime(2024, 3, 31, 12, 0, 0)
        assert resolve_start_date("2020-01-01", "1w", now=now) == "2024-03-24"

    def test_duration_in_months(self):
        now = datetime(2024, 3, 31, 12, 0, 0)
        assert resolve_start_date(None, "1mo", now=now) == "2024-03-01"

    def test_duration_in_hours_crosses_midnight(self):
        now = datetime(2024, 3, 31, 1, 0, 0)
        assert resolve_start_date(None, "2h", now=now) == "2024-03-30"

    def test_invalid_duration(self):
        with pytest.raises(DurationFormatError):
            resolve_start_date("2024-01-01", "soon")

    def test_duration_before_year_one(self):
        now = datetime(2024, 3, 31, 12, 0, 0)
        with pytest.raises(InvalidDurationFormat, match="before year 1"):
            resolve_start_date(None, "800000d", now=now)

    def test_early_year_is_zero_padded(self):
        now = datetime(2024, 3, 31, 12, 0, 0)
        assert resolve_start_date(None, "700000d", now=now) == "0107-09-18"
