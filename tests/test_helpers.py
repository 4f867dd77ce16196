"""Tests for shared helpers."""

import logging
import math

import pytest

from utils.helpers import (
    parse_json_field, is_valid_number, format_currency, format_compact_currency, get_risk_level,
    get_risk_level_label, parse_cost_links, format_cost_links
)
from modules.models import StepCostItem


def test_parse_json_field():
    assert parse_json_field('["a", "b"]', []) == ["a", "b"]
    assert parse_json_field(None, []) == []
    assert parse_json_field("", {}) == {}
    assert parse_json_field(["already"], []) == ["already"]


def test_parse_json_field_recovers_from_bad_data(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_json_field("{oops", [], "strategy x") == []
        assert parse_json_field('{"en": "x"}', [], "strategy y") == []
    assert "strategy x" in caplog.text
    assert "strategy y" in caplog.text


def test_is_valid_number():
    assert is_valid_number(0)
    assert is_valid_number(2.5)
    assert not is_valid_number(math.nan)
    assert not is_valid_number(True)
    assert not is_valid_number("3")


def test_currency_formatting():
    assert format_currency(0) == "$0"
    assert format_currency(12500, "JMD") == "J$ 12,500"
    assert format_compact_currency(2_500_000, "USD") == "$2.5M"
    assert format_compact_currency(4_200, "JMD") == "J$4.2K"


def test_compact_currency_prefers_stored_symbol():
    assert format_compact_currency(4_200, "BBD", "Bds$") == "Bds$4.2K"
    assert format_compact_currency(950, "XCD", "EC$") == "EC$950"
    assert format_compact_currency(950, "XCD", None) == format_compact_currency(950, "XCD")


def test_risk_levels():
    assert get_risk_level(9) == "CRITICAL"
    assert get_risk_level(6) == "HIGH"
    assert get_risk_level(0.5) == "VERY_LOW"
    assert get_risk_level_label(4.5) == "Medium"


def test_parse_cost_links():
    assert parse_cost_links("generator_5kw:1, fuel_storage:2") == [("generator_5kw", 1), ("fuel_storage", 2)]
    assert parse_cost_links(" sandbags , rope:2.5 ,") == [("sandbags", 1), ("rope", 2.5)]
    assert parse_cost_links("") == []
    assert parse_cost_links(None) == []


def test_parse_cost_links_rejects_bad_quantity():
    with pytest.raises(ValueError, match="Invalid quantity 'two' for cost item 'fuel'"):
        parse_cost_links("fuel:two")


def test_format_cost_links():
    links = [StepCostItem("generator", 1.0), StepCostItem("rope", 2.5)]
    assert format_cost_links(links) == "generator:1, rope:2.5"
    assert parse_cost_links(format_cost_links(links)) == [("generator", 1), ("rope", 2.5)]
    assert format_cost_links([]) == ""
