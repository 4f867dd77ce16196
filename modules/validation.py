"""
BCP Builder - Admin Write Validation
====================================
Checks reference data before it is stored. The aggregators trust what
comes out of the database, so bad numbers are stopped here.
"""

import logging

from utils.constants import COST_CATEGORIES, STRATEGY_TIERS, ACTION_PHASES, CANONICAL_HAZARDS, CATCH_ALL_RISK_IDS
from utils.helpers import is_valid_number
from modules.risk_ids import normalize

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when admin input fails validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _non_negative(value, label, errors):
    if not is_valid_number(value) or value < 0:
        errors.append(f"{label} must be a non-negative number")


def validate_cost_item(item):
    errors = []
    if not (item.item_id or "").strip():
        errors.append("Cost item id is required")
    if item.category not in COST_CATEGORIES:
        errors.append(f"Cost item category must be one of: {', '.join(COST_CATEGORIES)}")
    _non_negative(item.base_usd, "Base USD cost", errors)
    for label, value in (("Minimum USD cost", item.base_usd_min), ("Maximum USD cost", item.base_usd_max)):
        if value is not None:
            _non_negative(value, label, errors)
    if (is_valid_number(item.base_usd_min) and is_valid_number(item.base_usd_max)
            and item.base_usd_min > item.base_usd_max):
        errors.append("Minimum USD cost cannot exceed maximum USD cost")
    return errors


def validate_country_multiplier(multiplier):
    errors = []
    code = multiplier.country_code or ""
    if len(code) != 2 or not code.isalpha():
        errors.append("Country code must be a 2-letter code")
    for category in COST_CATEGORIES:
        _non_negative(getattr(multiplier, category), f"{category.title()} multiplier", errors)
    if not (multiplier.currency_code or "").strip():
        errors.append("Currency code is required")
    rate = multiplier.exchange_rate_usd
    if not is_valid_number(rate) or rate <= 0:
        errors.append("Exchange rate must be a positive number")
    return errors


def validate_step_cost_item(link, known_item_ids=None):
    errors = []
    if not (link.item_id or "").strip():
        errors.append("Cost item reference is required")
    elif known_item_ids is not None and link.item_id not in known_item_ids:
        errors.append(f"Unknown cost item '{link.item_id}'")
    _non_negative(link.quantity, f"Quantity for '{link.item_id}'", errors)
    return errors


def validate_action_step(step, known_item_ids=None):
    errors = []
    if not (step.step_id or "").strip():
        errors.append("Action step id is required")
    if step.phase not in ACTION_PHASES:
        errors.append(f"Action step phase must be one of: {', '.join(ACTION_PHASES)}")
    for link in step.cost_items:
        errors.extend(validate_step_cost_item(link, known_item_ids))
    return errors


def validate_strategy(strategy, known_hazard_ids=None, known_item_ids=None):
    """Validate a strategy and its nested action steps."""
    errors = []
    if not (strategy.strategy_id or "").strip():
        errors.append("Strategy id is required")
    if not strategy.title:
        errors.append("Strategy title is required")
    if strategy.tier not in STRATEGY_TIERS:
        errors.append(f"Strategy tier must be one of: {', '.join(STRATEGY_TIERS)}")

    known = set(known_hazard_ids or CANONICAL_HAZARDS) | CATCH_ALL_RISK_IDS
    for raw in strategy.applicable_risks:
        if normalize(raw) not in known:
            errors.append(f"Applicable risk '{raw}' is not a known hazard id")

    step_ids = [step.step_id for step in strategy.action_steps]
    if len(step_ids) != len(set(step_ids)):
        errors.append("Action step ids must be unique within a strategy")
    for step in strategy.action_steps:
        errors.extend(validate_action_step(step, known_item_ids))

    if errors:
        logger.warning(f"Strategy '{strategy.strategy_id}' failed validation: {errors}")
    return errors
