"""Shared test fixtures and catalog builders."""

import pytest

from modules import database
from modules.models import (
    LocalizedText, CostItem, StepCostItem, ActionStep, Strategy, CountryMultiplier
)


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh SQLite database per test."""
    monkeypatch.setattr(database, "DB_PATH", tmp_path / "test.db")
    database.init_database()
    return database


def make_item(item_id="generator", category="equipment", base_usd=100.0, **kwargs):
    return CostItem(item_id=item_id, name=LocalizedText.parse(kwargs.pop("name", item_id)),
                    category=category, base_usd=base_usd, **kwargs)


def make_step(step_id="s1", strategy_id="strat", timeframe="", phase="before", costs=None, title=None):
    """``costs`` is a list of (CostItem, quantity) pairs."""
    return ActionStep(
        step_id=step_id,
        strategy_id=strategy_id,
        title=LocalizedText.parse(title or step_id),
        phase=phase,
        timeframe=timeframe,
        cost_items=[StepCostItem(item_id=item.item_id, quantity=qty, item=item) for item, qty in (costs or [])]
    )


def make_strategy(strategy_id, risks, steps=None, tier="recommended", title=None):
    return Strategy(
        strategy_id=strategy_id,
        title=LocalizedText.parse(title or {"en": strategy_id.replace("_", " ").title()}),
        applicable_risks=list(risks),
        tier=tier,
        action_steps=steps or []
    )


def jamaica(**overrides):
    values = dict(country_code="JM", construction=1.2, equipment=1.5, service=0.9, supplies=1.0,
                  currency_code="JMD", currency_symbol="J$", exchange_rate_usd=156.5)
    values.update(overrides)
    return CountryMultiplier(**values)
