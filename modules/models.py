"""
BCP Builder - Data Model
========================
Reference entities curated by the admin panel and the ephemeral wizard
risk selection.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from utils.constants import DEFAULT_LOCALE, DEFAULT_CURRENCY, CURRENCY_SYMBOLS, COST_CATEGORIES
from modules.risk_ids import normalize


@dataclass
class LocalizedText:
    """Multilingual string with a locale fallback chain."""
    values: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw):
        """
        Build from a dict, a JSON object string, a plain string or None.

        Plain strings (and JSON that is not an object) are treated as
        default-locale text.
        """
        if raw is None:
            return cls()
        if isinstance(raw, LocalizedText):
            return raw
        if isinstance(raw, dict):
            return cls({str(k): str(v) for k, v in raw.items() if v})
        if isinstance(raw, str):
            text = raw.strip()
            if text.startswith("{"):
                try:
                    parsed = json.loads(text)
                except ValueError:
                    parsed = None
                if isinstance(parsed, dict):
                    return cls.parse(parsed)
            return cls({DEFAULT_LOCALE: raw}) if raw else cls()
        return cls({DEFAULT_LOCALE: str(raw)})

    def get(self, locale=DEFAULT_LOCALE, fallback=None):
        """Requested locale, then fallback, then default, then anything."""
        for loc in (locale, fallback, DEFAULT_LOCALE):
            if loc and self.values.get(loc):
                return self.values[loc]
        for value in self.values.values():
            if value:
                return value
        return ""

    def to_json(self):
        return json.dumps(self.values, ensure_ascii=False)

    def __bool__(self):
        return any(self.values.values())

    def __str__(self):
        return self.get()


@dataclass
class Hazard:
    hazard_id: str
    name: LocalizedText
    category: str


@dataclass
class CostItem:
    item_id: str
    name: LocalizedText
    category: str
    base_usd: float
    base_usd_min: Optional[float] = None
    base_usd_max: Optional[float] = None
    unit: str = ""


@dataclass
class StepCostItem:
    """Link between an action step and a cost item, with a quantity."""
    item_id: str
    quantity: float = 1
    item: Optional[CostItem] = None


@dataclass
class ActionStep:
    step_id: str
    strategy_id: str
    title: LocalizedText
    phase: str = "before"
    timeframe: str = ""
    sort_order: int = 0
    cost_items: List[StepCostItem] = field(default_factory=list)


@dataclass
class Strategy:
    strategy_id: str
    title: LocalizedText
    description: LocalizedText = field(default_factory=LocalizedText)
    applicable_risks: List[str] = field(default_factory=list)
    tier: str = "recommended"
    action_steps: List[ActionStep] = field(default_factory=list)
    is_active: bool = True


@dataclass
class CountryMultiplier:
    country_code: str
    construction: float = 1.0
    equipment: float = 1.0
    service: float = 1.0
    supplies: float = 1.0
    currency_code: str = DEFAULT_CURRENCY
    currency_symbol: str = CURRENCY_SYMBOLS[DEFAULT_CURRENCY]
    exchange_rate_usd: float = 1.0

    @classmethod
    def default(cls, country_code=""):
        """USD pricing with every category multiplier at 1.0."""
        return cls(country_code=country_code)

    def for_category(self, category):
        """Multiplier for a cost category; unknown categories scale by 1.0."""
        if category in COST_CATEGORIES:
            return getattr(self, category)
        return 1.0


@dataclass
class RiskSelection:
    """Hazards a user has confirmed in the wizard, with severity scores."""
    scores: Dict[str, Optional[float]] = field(default_factory=dict)

    @classmethod
    def from_ids(cls, risk_ids):
        selection = cls()
        for risk_id in risk_ids:
            selection.add(risk_id)
        return selection

    def add(self, risk_id, score=None):
        key = normalize(risk_id)
        if key:
            self.scores[key] = score
        return key

    def remove(self, risk_id):
        self.scores.pop(normalize(risk_id), None)

    def risk_ids(self):
        return list(self.scores)

    def __contains__(self, risk_id):
        return normalize(risk_id) in self.scores

    def __len__(self):
        return len(self.scores)


@dataclass
class StrategyCost:
    total_usd: float = 0.0
    total_local: float = 0.0
    currency_code: str = DEFAULT_CURRENCY
    currency_symbol: str = CURRENCY_SYMBOLS[DEFAULT_CURRENCY]
    calculated_hours: float = 0.0
    by_phase: Dict[str, float] = field(default_factory=dict)
    item_breakdown: List[dict] = field(default_factory=list)
    step_breakdown: List[dict] = field(default_factory=list)


def strategy_from_record(data):
    """
    Build a Strategy from a plain record.

    ``steps`` holds step records whose ``costs`` are (item_id, quantity)
    pairs; titles may be strings, locale dicts or LocalizedText.
    """
    steps = []
    for order, step in enumerate(data.get("steps", [])):
        steps.append(ActionStep(
            step_id=step["step_id"],
            strategy_id=data["strategy_id"],
            title=LocalizedText.parse(step.get("title")),
            phase=step.get("phase") or "before",
            timeframe=step.get("timeframe") or "",
            sort_order=order,
            cost_items=[StepCostItem(item_id=item_id, quantity=qty) for item_id, qty in step.get("costs", [])]
        ))

    return Strategy(
        strategy_id=data["strategy_id"],
        title=LocalizedText.parse(data.get("title")),
        description=LocalizedText.parse(data.get("description")),
        applicable_risks=list(data.get("applicable_risks", [])),
        tier=data.get("tier", "recommended"),
        action_steps=steps,
        is_active=data.get("is_active", True)
    )
