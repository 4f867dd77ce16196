"""Tests for timeframe parsing and effort totals."""

import logging

import pytest

from modules.timeframes import parse_timeframe_to_hours, sum_strategy_hours, format_hours, check_step_timeframes
from conftest import make_step, make_strategy


@pytest.mark.parametrize("text, hours", [
    ("2 hours", 2),
    ("1-2 days", 12),
    ("1 week", 40),
    ("2 to 3 weeks", 100),
    ("1 month", 160),
    ("1 year", 1920),
    ("30 minutes", 0.5),
    ("a week", 40),
    ("1.5 hours", 1.5),
])
def test_parse_timeframe(text, hours):
    assert parse_timeframe_to_hours(text) == pytest.approx(hours)


@pytest.mark.parametrize("text", ["ongoing", "Start this week", "ASAP", "whenever possible", "3"])
def test_free_text_is_one_nominal_hour(text):
    assert parse_timeframe_to_hours(text) == 1


@pytest.mark.parametrize("text", ["", None, "   "])
def test_empty_timeframe_is_zero(text):
    assert parse_timeframe_to_hours(text) == 0


def test_sum_strategy_hours():
    steps = [make_step("a", timeframe="2 hours"), make_step("b", timeframe="1-2 days"),
             make_step("c", timeframe=""), make_step("d", timeframe="ongoing")]
    assert sum_strategy_hours(steps) == 15
    assert sum_strategy_hours([]) == 0


def test_sum_rounds_to_one_decimal():
    steps = [make_step("a", timeframe="10 minutes"), make_step("b", timeframe="10 minutes")]
    assert sum_strategy_hours(steps) == 0.3


@pytest.mark.parametrize("hours, text", [
    (0, "Not estimated"),
    (0.5, "Less than 1 hour"),
    (1, "1 hour"),
    (3, "~3h"),
    (12, "~2 days"),
    (40, "~1 week"),
    (320, "~2 months"),
])
def test_format_hours(hours, text):
    assert format_hours(hours) == text


def test_check_step_timeframes(caplog):
    strategy = make_strategy("s", ["fire"], steps=[make_step("a", timeframe="1 day"), make_step("b")])
    with caplog.at_level(logging.WARNING):
        assert check_step_timeframes(strategy) == 1
    assert "1/2" in caplog.text
    assert check_step_timeframes(make_strategy("empty", ["fire"])) == 0
