"""
BCP Builder - Risk Scoring
==========================
Turns location hazard levels and a handful of simple wizard answers into
severity scores, then suggests which hazards the business should plan for.

Score (0-10) = location level × every applicable multiplier rule, capped at 10.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from utils.constants import (
    CUSTOMER_BASE_OPTIONS, POWER_DEPENDENCY_OPTIONS, DIGITAL_DEPENDENCY_OPTIONS,
    FLOOD_PRONE_LEVEL, MAX_RISK_SCORE, DEFAULT_SELECTION_THRESHOLD
)
from modules.models import RiskSelection
from modules.risk_ids import normalize, normalize_all

logger = logging.getLogger(__name__)

CONDITION_TYPES = ["boolean", "threshold", "range"]


@dataclass
class RiskMultiplierRule:
    name: str
    characteristic: str
    condition: str
    factor: float
    applicable_hazards: List[str] = field(default_factory=list)
    threshold: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    priority: int = 0
    is_active: bool = True
    reasoning: str = ""

    def applies_to(self, hazard_id):
        return normalize(hazard_id) in normalize_all(self.applicable_hazards)


DEFAULT_MULTIPLIER_RULES = [
    RiskMultiplierRule(
        name="Coastal location", characteristic="location_coastal", condition="boolean",
        factor=1.3, applicable_hazards=["hurricane", "flood"], priority=1,
        reasoning="Storm surge and coastal flooding"
    ),
    RiskMultiplierRule(
        name="Flood-prone area", characteristic="location_flood_prone", condition="boolean",
        factor=1.4, applicable_hazards=["flood"], priority=2
    ),
    RiskMultiplierRule(
        name="High power dependency", characteristic="power_dependency", condition="threshold",
        threshold=80, factor=1.5, applicable_hazards=["power_outage", "hurricane"], priority=3,
        reasoning="Cannot operate without electricity"
    ),
    RiskMultiplierRule(
        name="Digital operations", characteristic="digital_dependency", condition="threshold",
        threshold=80, factor=1.4, applicable_hazards=["cybersecurity_incident"], priority=4
    ),
    RiskMultiplierRule(
        name="Tourism dependent", characteristic="tourism_share", condition="threshold",
        threshold=60, factor=1.3, applicable_hazards=["economic_downturn", "pandemic", "hurricane"], priority=5
    ),
    RiskMultiplierRule(
        name="Complex supply chain", characteristic="supply_chain_complex", condition="boolean",
        factor=1.3, applicable_hazards=["supply_disruption"], priority=6
    ),
    RiskMultiplierRule(
        name="Urban location", characteristic="location_urban", condition="boolean",
        factor=1.2, applicable_hazards=["civil_unrest", "break_in_theft"], priority=7
    ),
]


def convert_simplified_inputs(answers):
    """
    Map wizard answers to fact-based business characteristics.

    ``answers`` keys: customer_base, power_dependency, digital_dependency,
    imports_from_overseas, sells_perishable, minimal_inventory,
    expensive_equipment, is_coastal, is_urban, flood_risk.
    """
    customer = CUSTOMER_BASE_OPTIONS.get(answers.get("customer_base"), CUSTOMER_BASE_OPTIONS["mainly_locals"])
    power = POWER_DEPENDENCY_OPTIONS.get(answers.get("power_dependency"), POWER_DEPENDENCY_OPTIONS["can_operate"])
    digital = DIGITAL_DEPENDENCY_OPTIONS.get(answers.get("digital_dependency"), DIGITAL_DEPENDENCY_OPTIONS["not_used"])
    perishable = bool(answers.get("sells_perishable"))
    minimal_inventory = bool(answers.get("minimal_inventory"))

    return {
        "location_coastal": bool(answers.get("is_coastal")),
        "location_urban": bool(answers.get("is_urban")),
        "location_flood_prone": (answers.get("flood_risk") or 0) > FLOOD_PRONE_LEVEL,
        "tourism_share": customer["tourism_share"],
        "local_customer_share": customer["local_customer_share"],
        "power_dependency": power["value"],
        "digital_dependency": digital["value"],
        "water_dependency": 90 if perishable else 30,
        "supply_chain_complex": bool(answers.get("imports_from_overseas")) or minimal_inventory or perishable,
        "perishable_goods": perishable,
        "just_in_time_inventory": minimal_inventory,
        "physical_asset_intensive": bool(answers.get("expensive_equipment"))
    }


def condition_met(rule, characteristics):
    value = characteristics.get(rule.characteristic)
    if value is None:
        return False

    if rule.condition == "boolean":
        return value is True
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if rule.condition == "threshold":
        return rule.threshold is not None and value >= rule.threshold
    if rule.condition == "range":
        if rule.min_value is None or rule.max_value is None:
            return False
        return rule.min_value <= value <= rule.max_value

    logger.warning(f"Unknown condition type '{rule.condition}' on rule '{rule.name}'")
    return False


def apply_multipliers(base_score, hazard_id, characteristics, rules):
    """Apply active rules for a hazard, in priority order."""
    final_score = base_score
    applied = []

    for rule in sorted(rules, key=lambda r: r.priority):
        if not rule.is_active or not rule.applies_to(hazard_id):
            continue
        if condition_met(rule, characteristics):
            final_score *= rule.factor
            applied.append({
                "name": rule.name,
                "factor": rule.factor,
                "reasoning": rule.reasoning
            })

    final_score = min(MAX_RISK_SCORE, final_score)
    if applied:
        reasoning = "Multipliers applied: " + ", ".join(f"{a['name']} ×{a['factor']}" for a in applied)
    else:
        reasoning = "No multipliers applied"

    return {
        "base_score": round(base_score, 1),
        "final_score": round(final_score, 1),
        "applied": applied,
        "reasoning": reasoning
    }


def build_risk_selection(location_levels, characteristics, rules,
                         threshold=DEFAULT_SELECTION_THRESHOLD):
    """
    Suggest a RiskSelection from per-hazard location levels (0-10).

    Hazards whose adjusted score reaches ``threshold`` are selected with
    that score attached.
    """
    selection = RiskSelection()
    for raw_id, level in location_levels.items():
        if not level:
            continue
        scored = apply_multipliers(level, raw_id, characteristics, rules)
        if scored["final_score"] >= threshold:
            selection.add(raw_id, scored["final_score"])
    return selection
