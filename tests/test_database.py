"""Tests for the SQLite reference catalog."""

import sqlite3

import pytest

from modules.models import CountryMultiplier, LocalizedText, RiskSelection, strategy_from_record
from modules.matching import find_non_canonical_references
from modules.costs import calculate_strategy_cost
from utils.helpers import parse_cost_links
from modules.validation import ValidationError
from conftest import make_item, make_step, make_strategy, jamaica


def test_hazards_stored_canonical(db):
    assert db.upsert_hazard("PowerOutage", {"en": "Power Outage"}, "technological") == "power_outage"
    hazards = db.get_hazards()
    assert [h.hazard_id for h in hazards] == ["power_outage"]
    assert hazards[0].name.get() == "Power Outage"

    with pytest.raises(ValidationError):
        db.upsert_hazard("", "Nothing")


def test_hazard_edit_keeps_one_record_per_id(db):
    db.upsert_hazard("volcanic_ash", {"en": "Volcanic Ash"}, "natural")
    db.upsert_hazard("VolcanicAsh", {"en": "Volcanic Ash", "es": "Ceniza volcánica"}, "natural")

    hazards = db.get_hazards()
    assert [h.hazard_id for h in hazards] == ["volcanic_ash"]
    assert hazards[0].name.get("es") == "Ceniza volcánica"

    with pytest.raises(ValidationError) as exc:
        db.upsert_hazard("tsunami", {"en": ""})
    assert exc.value.errors == ["Hazard name is required"]


def test_cost_item_upsert_and_delete(db):
    db.upsert_cost_item(make_item("kit", "supplies", 35, unit="kit"))
    db.upsert_cost_item(make_item("kit", "supplies", 40, unit="kit"))

    items = db.get_cost_items()
    assert list(items) == ["kit"]
    assert items["kit"].base_usd == 40

    db.delete_cost_item("kit")
    assert db.get_cost_items() == {}


def test_cost_item_rejects_negative_cost(db):
    with pytest.raises(ValidationError):
        db.upsert_cost_item(make_item(base_usd=-5))
    assert db.get_cost_items() == {}


def test_one_multiplier_per_country(db):
    db.upsert_country_multiplier(jamaica())
    db.upsert_country_multiplier(jamaica(country_code="jm", exchange_rate_usd=160.0))

    multipliers = db.get_country_multipliers()
    assert list(multipliers) == ["JM"]
    assert multipliers["JM"].exchange_rate_usd == 160.0
    assert db.get_country_multiplier("jm").currency_code == "JMD"
    assert db.get_country_multiplier("ZZ") is None


def test_save_and_load_strategy_with_steps(db):
    generator = make_item("generator", "equipment", 1200)
    db.upsert_cost_item(generator)
    strategy = make_strategy("backup_power", ["PowerOutage", "flooding"], tier="essential", steps=[
        make_step("bp_1", "backup_power", timeframe="2 hours"),
        make_step("bp_2", "backup_power", timeframe="1-2 days", costs=[(generator, 2)]),
    ])

    db.save_strategy(strategy)
    loaded = db.get_strategy("backup_power")

    assert loaded.applicable_risks == ["power_outage", "flood"]
    assert [s.step_id for s in loaded.action_steps] == ["bp_1", "bp_2"]
    link = loaded.action_steps[1].cost_items[0]
    assert link.quantity == 2
    assert link.item.base_usd == 1200
    assert loaded.title.get() == "Backup Power"


def test_save_strategy_replaces_steps(db):
    db.save_strategy(make_strategy("s", ["fire"], steps=[make_step("a", "s"), make_step("b", "s")]))
    db.save_strategy(make_strategy("s", ["fire"], steps=[make_step("c", "s")]))

    assert [s.step_id for s in db.get_strategy("s").action_steps] == ["c"]


def test_save_strategy_rejects_unknown_cost_item(db):
    ghost = make_item("ghost")
    with pytest.raises(ValidationError) as exc:
        db.save_strategy(make_strategy("s", ["fire"], steps=[make_step("a", "s", costs=[(ghost, 1)])]))
    assert "Unknown cost item 'ghost'" in exc.value.errors
    assert db.get_strategy("s") is None


def test_replace_strategies_is_atomic(db):
    db.save_strategy(make_strategy("old", ["fire"], steps=[make_step("old_1", "old")]))

    # Same step id in two strategies violates the primary key mid-transaction
    clash = [
        make_strategy("new_a", ["fire"], steps=[make_step("dup", "new_a")]),
        make_strategy("new_b", ["flood"], steps=[make_step("dup", "new_b")]),
    ]
    with pytest.raises(sqlite3.IntegrityError):
        db.replace_strategies(clash)

    assert [s.strategy_id for s in db.get_strategies()] == ["old"]

    assert db.replace_strategies([make_strategy("new_a", ["fire"])]) == 1
    assert [s.strategy_id for s in db.get_strategies()] == ["new_a"]


def test_malformed_json_loads_as_empty(db, caplog):
    db.save_strategy(make_strategy("legacy", ["fire"]))
    with db.connect() as conn:
        conn.execute("UPDATE strategies SET applicable_risks = ?, title = ? WHERE strategy_id = ?",
                     ("[not json", '{"en": oops', "legacy"))

    loaded = db.get_strategy("legacy")
    assert loaded.applicable_risks == []
    assert loaded.title.get() == '{"en": oops'
    assert "Malformed JSON" in caplog.text


def test_inactive_strategies_filtered(db):
    hidden = make_strategy("hidden", ["fire"])
    hidden.is_active = False
    db.save_strategy(hidden)
    db.save_strategy(make_strategy("shown", ["fire"]))

    assert [s.strategy_id for s in db.get_strategies()] == ["shown"]
    assert len(db.get_strategies(active_only=False)) == 2


def test_delete_strategy_cascades(db):
    db.upsert_cost_item(make_item("kit"))
    db.save_strategy(make_strategy("s", ["fire"], steps=[make_step("a", "s", costs=[(make_item("kit"), 1)])]))
    db.delete_strategy("s")

    with db.connect() as conn:
        assert conn.execute("SELECT COUNT(*) FROM action_steps").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM action_step_cost_items").fetchone()[0] == 0


def test_connect_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.connect() as conn:
            conn.execute("INSERT INTO hazards (hazard_id, name) VALUES ('fire', '{}')")
            raise RuntimeError("boom")

    assert db.get_hazards() == []


def test_save_and_get_plan(db):
    selection = RiskSelection.from_ids(["hurricane", "Flooding"])
    totals = {"total_usd": 300.0, "total_local": 46950.0, "currency_code": "JMD", "calculated_hours": 12.0}

    plan_id = db.save_plan("Island Bakery", "jm", selection, ["backup_power"], totals)
    plan = db.get_plan(plan_id)

    assert plan["business_name"] == "Island Bakery"
    assert plan["country_code"] == "JM"
    assert plan["risk_selection"] == {"hurricane": None, "flood": None}
    assert plan["strategy_ids"] == ["backup_power"]
    assert plan["total_local"] == 46950.0
    assert [p["id"] for p in db.get_plans()] == [plan_id]
    assert db.get_plan(999) is None


def test_step_id_owned_by_another_strategy_is_rejected(db):
    db.save_strategy(make_strategy("first", ["fire"], steps=[make_step("shared", "first")]))

    with pytest.raises(ValidationError) as exc:
        db.save_strategy(make_strategy("second", ["flood"], steps=[make_step("shared", "second")]))

    assert exc.value.errors == ["Action step id 'shared' is already used by strategy 'first'"]
    assert db.get_strategy("second") is None
    assert [s.step_id for s in db.get_strategy("first").action_steps] == ["shared"]


def test_audit_accepts_every_hazard_the_write_path_accepts(db):
    db.upsert_hazard("volcanic_ash", {"en": "Volcanic Ash"}, "natural")
    db.save_strategy(make_strategy("masks", ["volcanic_ash", "hurricane"]))

    known = db.get_known_hazard_ids()
    assert find_non_canonical_references(db.get_strategies(), known) == {}

    with db.connect() as conn:
        conn.execute("UPDATE strategies SET applicable_risks = ? WHERE strategy_id = ?",
                     ('["hurricane", "meteor_strike"]', "masks"))
    assert find_non_canonical_references(db.get_strategies(), known) == {"masks": ["meteor_strike"]}


def test_admin_edited_strategy_saves_and_prices(db):
    db.upsert_cost_item(make_item("generator", "equipment", 1000))
    db.upsert_cost_item(make_item("fuel", "supplies", 50))
    db.upsert_country_multiplier(jamaica())

    record = {
        "strategy_id": "backup_power",
        "title": {"en": "Backup Power", "es": "Energía de respaldo"},
        "tier": "essential",
        "applicable_risks": ["PowerOutage"],
        "steps": [
            {"step_id": "bp_buy", "title": "Buy generator", "phase": "before", "timeframe": "1 day",
             "costs": parse_cost_links("generator:1, fuel:2")},
            {"step_id": "bp_run", "title": "Run it", "phase": "during", "timeframe": "", "costs": []},
        ]
    }
    db.save_strategy(strategy_from_record(record))
    loaded = db.get_strategy("backup_power")

    assert loaded.applicable_risks == ["power_outage"]
    assert [s.step_id for s in loaded.action_steps] == ["bp_buy", "bp_run"]

    cost = calculate_strategy_cost(loaded.action_steps, "JM", db.get_country_multipliers())
    # 1000 x 1.5 + 2 x 50 x 1.0
    assert cost.total_usd == 1600
    assert cost.total_local == 1600 * 156.5
    assert cost.calculated_hours == 8
