"""
BCP Builder - Strategy Matcher
==============================
Matches the risks a business selected in the wizard against the strategy
catalog.

A strategy is listed under every selected risk it covers, so a hurricane
strategy that also handles flooding shows up under both. Selected risks with
no strategy at all are reported as coverage gaps rather than dropped.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from utils.constants import CANONICAL_HAZARDS, CATCH_ALL_RISK_IDS, MIN_MATCH_TOKEN_LENGTH
from modules.risk_ids import normalize, normalize_all

logger = logging.getLogger(__name__)

MATCH_EXACT = "exact"
MATCH_SUBSTRING = "substring"
MATCH_TOKEN = "token"


@dataclass
class MatchResult:
    by_risk: Dict[str, list] = field(default_factory=dict)
    universal: list = field(default_factory=list)

    @property
    def coverage_gaps(self):
        """Selected risks that no strategy addresses."""
        return [risk_id for risk_id, matched in self.by_risk.items() if not matched]

    def strategies(self):
        """Every matched strategy once, in first-seen order."""
        seen = {}
        for matched in self.by_risk.values():
            for strategy in matched:
                seen.setdefault(strategy.strategy_id, strategy)
        return list(seen.values())

    def risks_for(self, strategy_id):
        return [risk_id for risk_id, matched in self.by_risk.items()
                if any(s.strategy_id == strategy_id for s in matched)]


def _words(risk_id):
    return {word for word in risk_id.split("_") if len(word) >= MIN_MATCH_TOKEN_LENGTH}


def risk_ids_match(selected, applicable):
    """
    Compare two risk ids after normalization.

    Rules are tried in order: exact match, substring containment in either
    direction, then a shared whole ``_``-separated word of at least
    ``MIN_MATCH_TOKEN_LENGTH`` characters. Returns the name
    of the first rule that matched, or None.
    """
    a = normalize(selected)
    b = normalize(applicable)
    if not a or not b:
        return None

    if a == b:
        return MATCH_EXACT
    if a in b or b in a:
        return MATCH_SUBSTRING
    if _words(a) & _words(b):
        return MATCH_TOKEN
    return None


def is_universal(strategy):
    """Strategies with no hazard tags, or tagged for all hazards."""
    risks = normalize_all(strategy.applicable_risks)
    return not risks or any(r in CATCH_ALL_RISK_IDS for r in risks)


def strategy_covers(strategy, risk_id):
    return any(risk_ids_match(risk_id, applicable) for applicable in strategy.applicable_risks)


def match(selected_risk_ids, strategies):
    """
    Group applicable strategies under each selected risk id.

    Every selected risk appears as a key; an empty list marks a coverage gap.
    Universal strategies are returned separately and never appear per risk.
    """
    result = MatchResult()
    specific = []
    for strategy in strategies:
        if is_universal(strategy):
            result.universal.append(strategy)
        else:
            specific.append(strategy)

    for risk_id in normalize_all(selected_risk_ids):
        result.by_risk[risk_id] = [s for s in specific if strategy_covers(s, risk_id)]

    for risk_id in result.coverage_gaps:
        logger.warning(f"No strategies found for selected risk '{risk_id}'")

    return result


def coverage_report(hazard_ids, strategies):
    """
    Admin audit: which strategies cover each hazard.

    Returns a list of dicts sorted with gaps first, then by ascending count.
    """
    result = match(hazard_ids, strategies)
    rows = []
    for risk_id, matched in result.by_risk.items():
        rows.append({
            "risk_id": risk_id,
            "strategy_ids": [s.strategy_id for s in matched],
            "strategy_count": len(matched),
            "is_gap": not matched
        })
    rows.sort(key=lambda r: (not r["is_gap"], r["strategy_count"], r["risk_id"]))
    return rows


def find_non_canonical_references(strategies, known_ids=None):
    """Map strategy id -> applicable risk ids that are not known hazards."""
    known = set(known_ids or CANONICAL_HAZARDS) | CATCH_ALL_RISK_IDS
    problems = {}
    for strategy in strategies:
        bad = [raw for raw in strategy.applicable_risks if normalize(raw) not in known]
        if bad:
            problems[strategy.strategy_id] = bad
    return problems
