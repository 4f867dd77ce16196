"""
BCP Builder - Cost Aggregator
=============================
Sums itemized action-step costs into strategy and plan totals in USD and
in the local currency of the selected country.

Formula per cost item:

    cost (USD) = base USD × quantity × country category multiplier
    cost (local) = cost (USD) × exchange rate

Inputs are assumed validated on the admin write path; nothing here
re-checks for negative or non-numeric values.
"""

import logging

from utils.constants import ACTION_PHASES, LEGACY_PHASES
from utils.helpers import format_currency
from modules.models import CountryMultiplier, StrategyCost
from modules.timeframes import sum_strategy_hours

logger = logging.getLogger(__name__)


def resolve_multiplier(country_code, multipliers):
    """Multiplier record for a country, or the USD/1.0 default."""
    record = (multipliers or {}).get((country_code or "").upper())
    if record is None:
        logger.info(f"No country multiplier for '{country_code}', using USD defaults")
        return CountryMultiplier.default(country_code)
    return record


def phase_key(phase):
    phase = (phase or "").lower()
    if phase in ACTION_PHASES:
        return phase
    return LEGACY_PHASES.get(phase, "before")


def calculate_item_cost(cost_item, quantity, multiplier):
    """Cost of ``quantity`` units of an item for the given country."""
    unit_usd = (cost_item.base_usd or 0) * multiplier.for_category(cost_item.category)
    total_usd = unit_usd * quantity
    return {
        "item_id": cost_item.item_id,
        "name": cost_item.name.get(),
        "category": cost_item.category,
        "unit": cost_item.unit,
        "quantity": quantity,
        "unit_price_usd": unit_usd,
        "total_usd": total_usd,
        "local_amount": total_usd * multiplier.exchange_rate_usd
    }


def calculate_step_cost(step, multiplier, cost_items=None):
    """
    Itemized cost of one action step.

    Links without a resolved item are looked up in ``cost_items`` and
    skipped (with a warning) when still unknown.
    """
    breakdown = []
    for link in step.cost_items:
        item = link.item or (cost_items or {}).get(link.item_id)
        if item is None:
            logger.warning(f"Cost item '{link.item_id}' on step '{step.step_id}' not found")
            continue
        breakdown.append(calculate_item_cost(item, link.quantity, multiplier))

    total_usd = sum(entry["total_usd"] for entry in breakdown)
    return total_usd, breakdown


def calculate_strategy_cost(action_steps, country_code, multipliers=None, cost_items=None):
    """
    Total cost and effort of a strategy's action steps.

    ``multipliers`` maps country code -> CountryMultiplier. A country without
    a record is priced in USD with every multiplier at 1.0. Steps without
    cost items contribute exactly 0.
    """
    multiplier = resolve_multiplier(country_code, multipliers)
    result = StrategyCost(
        currency_code=multiplier.currency_code,
        currency_symbol=multiplier.currency_symbol,
        by_phase={phase: 0.0 for phase in ACTION_PHASES}
    )

    items = {}
    total_usd = 0.0
    for step in action_steps or []:
        step_usd, breakdown = calculate_step_cost(step, multiplier, cost_items)
        total_usd += step_usd
        result.by_phase[phase_key(step.phase)] += step_usd

        for entry in breakdown:
            merged = items.get(entry["item_id"])
            if merged:
                merged["quantity"] += entry["quantity"]
                merged["total_usd"] += entry["total_usd"]
                merged["local_amount"] += entry["local_amount"]
            else:
                items[entry["item_id"]] = dict(entry)

        result.step_breakdown.append({
            "step_id": step.step_id,
            "title": step.title.get(),
            "phase": phase_key(step.phase),
            "timeframe": step.timeframe,
            "total_usd": step_usd,
            "local_amount": step_usd * multiplier.exchange_rate_usd
        })

    result.total_usd = total_usd
    result.total_local = total_usd * multiplier.exchange_rate_usd
    result.item_breakdown = list(items.values())
    result.calculated_hours = sum_strategy_hours(action_steps)
    return result


def calculate_plan_cost(strategies, country_code, multipliers=None, cost_items=None):
    """
    Totals for a whole plan.

    Each strategy is counted once even if it was matched under several risks.
    """
    multiplier = resolve_multiplier(country_code, multipliers)
    per_strategy = {}
    for strategy in strategies:
        if strategy.strategy_id in per_strategy:
            continue
        per_strategy[strategy.strategy_id] = calculate_strategy_cost(
            strategy.action_steps, country_code, multipliers, cost_items
        )

    total_usd = sum(cost.total_usd for cost in per_strategy.values())
    return {
        "total_usd": total_usd,
        "total_local": total_usd * multiplier.exchange_rate_usd,
        "currency_code": multiplier.currency_code,
        "currency_symbol": multiplier.currency_symbol,
        "calculated_hours": round(sum(c.calculated_hours for c in per_strategy.values()), 1),
        "strategies": per_strategy
    }


def format_cost(amount, currency_code="USD", symbol=None):
    """Display string for a cost; zero renders as ``$0``, never a placeholder."""
    return format_currency(amount or 0, currency_code, symbol)
