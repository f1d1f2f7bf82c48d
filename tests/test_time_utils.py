"""Tests for time parsing and formatting utilities."""
import math

import pytest

from utils.time_utils import format_hours, format_time, parse_hours, parse_quantity


class TestFormatTime:
    """Test clock formatting."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (61, "00:01:01"),
        (3600, "01:00:00"),
        (3725.9, "01:02:05"),
        (360000, "100:00:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_time(seconds) == expected

    @pytest.mark.parametrize("bad", [-5, math.nan, math.inf, None])
    def test_bad_input_is_zero(self, bad):
        assert format_time(bad) == "00:00:00"


class TestFormatHours:
    """Test decimal hour formatting."""

    def test_one_decimal(self):
        assert format_hours(5400) == "1.5"
        assert format_hours(12600) == "3.5"

    def test_zero_and_bad_input(self):
        assert format_hours(0) == "0.0"
        assert format_hours(-10) == "0.0"
        assert format_hours(math.nan) == "0.0"


class TestParseHours:
    """Test manual time entry parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("2", 2.0),
        ("1.5", 1.5),
        (".5", 0.5),
        ("90m", 1.5),
        ("1h30m", 1.5),
        ("1h 30m", 1.5),
        ("2h", 2.0),
        ("45s", 0.0125),
        (" 3 ", 3.0),
    ])
    def test_valid(self, text, expected):
        assert parse_hours(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "abc", "-1", "1x", "h"])
    def test_invalid(self, text):
        assert parse_hours(text) is None


class TestParseQuantity:
    """Test count parsing."""

    def test_valid(self):
        assert parse_quantity("12") == 12
        assert parse_quantity(" 0 ") == 0

    @pytest.mark.parametrize("text", ["", "1.5", "-2", "ten"])
    def test_invalid(self, text):
        assert parse_quantity(text) is None
