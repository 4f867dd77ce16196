"""Tests for risk-to-strategy matching."""

import logging

from modules.matching import (
    match, risk_ids_match, is_universal, coverage_report, find_non_canonical_references,
    MATCH_EXACT, MATCH_SUBSTRING, MATCH_TOKEN
)
from conftest import make_strategy


def test_tie_break_rules_in_order():
    assert risk_ids_match("power_outage", "PowerOutage") == MATCH_EXACT
    assert risk_ids_match("flood", "flooding") == MATCH_EXACT
    assert risk_ids_match("fire", "fire_damage") == MATCH_SUBSTRING
    assert risk_ids_match("coastal_flood_surge", "flood") == MATCH_SUBSTRING
    assert risk_ids_match("storm_surge", "surge_protection") == MATCH_TOKEN
    assert risk_ids_match("earthquake", "hurricane") is None
    assert risk_ids_match("", "hurricane") is None


def test_short_filler_words_do_not_match():
    assert risk_ids_match("fire_in_kitchen", "break_in_theft") is None
    assert risk_ids_match("loss_of_power", "loss_of_stock") == MATCH_TOKEN
    assert risk_ids_match("act_of_war", "act_of_god") == MATCH_TOKEN
    assert risk_ids_match("flood_of_ice", "act_of_god") is None


def test_filler_word_hazard_does_not_pull_in_unrelated_strategies():
    burglary = make_strategy("alarm", ["break_in_theft"])
    result = match(["fire_in_kitchen"], [burglary])
    assert result.coverage_gaps == ["fire_in_kitchen"]


def test_strategy_listed_under_matching_risk():
    s = make_strategy("backup_power", ["PowerOutage"])
    result = match({"power_outage"}, [s])
    assert result.by_risk["power_outage"] == [s]


def test_multi_risk_strategy_fans_out():
    s = make_strategy("shutters", ["hurricane", "flood", "power_outage"])
    result = match(["hurricane", "flood"], [s])
    assert s in result.by_risk["hurricane"]
    assert s in result.by_risk["flood"]
    assert result.strategies() == [s]
    assert result.risks_for("shutters") == ["hurricane", "flood"]


def test_end_to_end_selection():
    s1 = make_strategy("S1", ["hurricane", "flood", "power_outage"])
    s2 = make_strategy("S2", ["earthquake"])

    result = match(["hurricane", "flood"], [s1, s2])

    assert result.by_risk["hurricane"] == [s1]
    assert result.by_risk["flood"] == [s1]
    assert s2 not in result.strategies()
    assert result.coverage_gaps == []


def test_selected_ids_are_normalized():
    s = make_strategy("sandbags", ["flood"])
    result = match(["Flooding"], [s])
    assert list(result.by_risk) == ["flood"]
    assert result.by_risk["flood"] == [s]


def test_coverage_gap_is_reported(caplog):
    s = make_strategy("S1", ["hurricane"])
    with caplog.at_level(logging.WARNING):
        result = match(["hurricane", "drought"], [s])

    assert result.by_risk["drought"] == []
    assert result.coverage_gaps == ["drought"]
    assert "drought" in caplog.text


def test_universal_strategies_are_separate():
    tagged_all = make_strategy("contacts", ["all_hazards"])
    untagged = make_strategy("insurance", [])
    specific = make_strategy("generator", ["power_outage"])

    result = match(["power_outage", "fire"], [tagged_all, untagged, specific])

    assert result.universal == [tagged_all, untagged]
    assert result.by_risk["power_outage"] == [specific]
    assert result.by_risk["fire"] == []
    assert is_universal(untagged)
    assert not is_universal(specific)


def test_empty_selection():
    result = match([], [make_strategy("S1", ["fire"])])
    assert result.by_risk == {}
    assert result.coverage_gaps == []


def test_coverage_report_lists_gaps_first():
    strategies = [
        make_strategy("a", ["hurricane", "flood"]),
        make_strategy("b", ["hurricane"]),
    ]
    report = coverage_report(["hurricane", "flood", "drought"], strategies)

    assert [r["risk_id"] for r in report] == ["drought", "flood", "hurricane"]
    assert report[0]["is_gap"] is True
    assert report[2]["strategy_ids"] == ["a", "b"]


def test_find_non_canonical_references():
    strategies = [
        make_strategy("ok", ["PowerOutage", "all_hazards"]),
        make_strategy("bad", ["hurricane", "coastal_erosion"]),
    ]
    assert find_non_canonical_references(strategies) == {"bad": ["coastal_erosion"]}
    assert find_non_canonical_references(strategies, ["coastal_erosion"]) == {
        "ok": ["PowerOutage"], "bad": ["hurricane"]
    }
