"""Tests for risk identifier normalization."""

import pytest

from utils.constants import CANONICAL_HAZARDS, RISK_ID_SYNONYMS
from modules.models import LocalizedText
from modules.risk_ids import normalize, normalize_all, to_snake_case, is_canonical, display_name


@pytest.mark.parametrize("raw", ["PowerOutage", "power_outage", "Power Outage", "power-outage",
                                 "  POWER outage  ", "powerOutage"])
def test_power_outage_spellings_agree(raw):
    assert normalize(raw) == "power_outage"


def test_mechanical_conversion():
    assert to_snake_case("SupplyChainDisruption") == "supply_chain_disruption"
    assert to_snake_case("Break-in / Theft") == "break_in_theft"
    assert to_snake_case("__weird!!  id__") == "weird_id"
    assert to_snake_case("covid19Outbreak") == "covid19_outbreak"


def test_synonyms_map_to_one_canonical_id():
    assert normalize("flooding") == "flood"
    assert normalize("Flood") == "flood"
    assert normalize("pandemicDisease") == "pandemic"
    assert normalize("health_emergency") == "pandemic"
    assert normalize("cyberAttack") == "cybersecurity_incident"
    assert normalize("cyber_attack") == "cybersecurity_incident"
    assert normalize("theft") == "break_in_theft"
    assert normalize("supply_chain_disruption") == "supply_disruption"


def test_falsy_and_non_string_input():
    assert normalize("") == ""
    assert normalize(None) == ""
    assert normalize(42) == ""
    assert normalize("!!!") == ""


@pytest.mark.parametrize("raw", ["PowerOutage", "flooding", "Cyber Attack", "pandemicDisease",
                                 "  ", "--a--b--", "HTTPServerDown", "x__Y", "Théft", "all_hazards"])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_synonym_table_targets_are_canonical():
    for alias, target in RISK_ID_SYNONYMS.items():
        assert target in CANONICAL_HAZARDS, alias
        assert target not in RISK_ID_SYNONYMS
        assert to_snake_case(alias) == alias


def test_normalize_all_dedupes_and_drops_empty():
    assert normalize_all(["Flood", "flooding", "", None, "hurricane", "flood"]) == ["flood", "hurricane"]
    assert normalize_all(None) == []


def test_is_canonical_and_display_name():
    assert is_canonical("power_outage")
    assert not is_canonical("PowerOutage")
    assert display_name("PowerOutage") == "Power Outage"
    assert display_name("volcanic_ash") == "Volcanic Ash"


def test_accented_letters_are_folded():
    assert to_snake_case("Théft") == "theft"
    assert normalize("Théft") == "break_in_theft"
    assert to_snake_case("Sécheresse Côtière") == "secheresse_cotiere"
    assert to_snake_case("Inundación") == "inundacion"


def test_display_name_uses_stored_localized_names():
    names = {
        "flood": LocalizedText({"en": "Flooding", "es": "Inundación", "fr": "Inondation"}),
        "drought": LocalizedText({"en": "Drought"}),
    }
    assert display_name("flood", "es", names) == "Inundación"
    assert display_name("Flooding", "fr", names) == "Inondation"
    assert display_name("drought", "es", names) == "Drought"
    assert display_name("power_outage", "es", names) == "Power Outage"
    assert display_name("volcanic_ash", "fr", names) == "Volcanic Ash"
