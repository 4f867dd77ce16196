"""Tests for admin write-path validation."""

import math

import pytest

from modules.validation import (
    ValidationError, validate_cost_item, validate_country_multiplier, validate_strategy,
    validate_step_cost_item
)
from modules.models import StepCostItem
from conftest import make_item, make_step, make_strategy, jamaica


def test_valid_cost_item():
    assert validate_cost_item(make_item(base_usd_min=50, base_usd_max=150)) == []


@pytest.mark.parametrize("base_usd", [-1, math.nan, math.inf, "100", None, True])
def test_cost_item_rejects_bad_base_cost(base_usd):
    errors = validate_cost_item(make_item(base_usd=base_usd))
    assert any("Base USD" in e for e in errors)


def test_cost_item_rejects_unknown_category_and_bad_range():
    errors = validate_cost_item(make_item(category="furniture", base_usd_min=200, base_usd_max=100))
    assert len(errors) == 2


def test_country_multiplier_validation():
    assert validate_country_multiplier(jamaica()) == []
    errors = validate_country_multiplier(jamaica(country_code="JAM", exchange_rate_usd=0, equipment=-1))
    assert len(errors) == 3


def test_step_cost_item_quantity():
    assert validate_step_cost_item(StepCostItem("kit", 2)) == []
    assert validate_step_cost_item(StepCostItem("kit", math.nan))
    assert validate_step_cost_item(StepCostItem("kit", -1))
    assert validate_step_cost_item(StepCostItem("kit", 1), known_item_ids={"other"}) == ["Unknown cost item 'kit'"]


def test_valid_strategy():
    item = make_item()
    strategy = make_strategy("gen", ["PowerOutage", "hurricane"], tier="essential",
                             steps=[make_step("a", costs=[(item, 1)])])
    assert validate_strategy(strategy, known_item_ids={"generator"}) == []


def test_strategy_rejects_unknown_hazard_and_tier():
    strategy = make_strategy("gen", ["meteor"], tier="urgent")
    errors = validate_strategy(strategy)
    assert len(errors) == 2


def test_strategy_accepts_catch_all_and_custom_hazards():
    assert validate_strategy(make_strategy("a", ["all_hazards"])) == []
    assert validate_strategy(make_strategy("b", ["volcano"]), known_hazard_ids={"volcano"}) == []


def test_strategy_rejects_duplicate_steps_and_bad_phase():
    strategy = make_strategy("s", ["fire"], steps=[make_step("x"), make_step("x", phase="sometime")])
    errors = validate_strategy(strategy)
    assert "Action step ids must be unique within a strategy" in errors
    assert any("phase" in e for e in errors)


def test_validation_error_carries_messages():
    error = ValidationError(["a", "b"])
    assert error.errors == ["a", "b"]
    assert str(error) == "a; b"
    assert isinstance(error, ValueError)
