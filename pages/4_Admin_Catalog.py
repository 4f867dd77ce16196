"""
BCP Builder - Admin Catalog Module
==================================
Curate hazards, strategies with their action steps, country multipliers
and cost items. Strategy costs are previewed per country while editing, and
the coverage audit lists hazards that have no strategies.
"""

import streamlit as st
import pandas as pd
import sys
from pathlib import Path

APP_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(APP_DIR))

from utils.constants import (
    COST_CATEGORIES, CURRENCY_SYMBOLS, HAZARD_CATEGORIES, STRATEGY_TIERS, ACTION_PHASES,
    SUPPORTED_LOCALES, DEFAULT_LOCALE
)
from utils.helpers import parse_cost_links, format_cost_links
from modules.database import (
    init_database, get_hazards, upsert_hazard, get_known_hazard_ids, get_strategies, save_strategy,
    delete_strategy, get_cost_items, upsert_cost_item, delete_cost_item, get_country_multipliers,
    upsert_country_multiplier
)
from modules.models import CostItem, CountryMultiplier, LocalizedText, strategy_from_record
from modules.risk_ids import display_name
from modules.validation import ValidationError
from modules.matching import coverage_report, find_non_canonical_references
from modules.costs import calculate_strategy_cost, format_cost
from modules.timeframes import format_hours, check_step_timeframes

st.set_page_config(page_title="Admin Catalog | BCP Builder", page_icon="🛠️", layout="wide")

init_database()

STEP_EDITOR_COLUMNS = ["step_id", "title", "phase", "timeframe", "cost_items"]


def country_multipliers_tab():
    """Edit per-country category multipliers and exchange rates."""
    multipliers = get_country_multipliers()

    if multipliers:
        st.dataframe(pd.DataFrame([vars(m) for m in multipliers.values()]),
                     use_container_width=True, hide_index=True)

    with st.form("country_multiplier"):
        col1, col2 = st.columns(2)
        with col1:
            country_code = st.text_input("Country Code *", max_chars=2).upper()
            currency_code = st.selectbox("Currency", options=list(CURRENCY_SYMBOLS.keys()))
            exchange_rate = st.number_input("Exchange rate (local per USD)", min_value=0.0001, value=1.0)
        with col2:
            values = {
                category: st.number_input(f"{category.title()} multiplier", min_value=0.0, value=1.0, step=0.05)
                for category in COST_CATEGORIES
            }

        if st.form_submit_button("💾 Save Multiplier", type="primary"):
            try:
                upsert_country_multiplier(CountryMultiplier(
                    country_code=country_code,
                    currency_code=currency_code,
                    currency_symbol=CURRENCY_SYMBOLS[currency_code],
                    exchange_rate_usd=exchange_rate,
                    **values
                ))
                st.success(f"Saved multiplier for {country_code}")
                st.rerun()
            except ValidationError as e:
                for error in e.errors:
                    st.error(error)


def cost_items_tab():
    """Cost item library."""
    items = get_cost_items()

    if items:
        st.dataframe(pd.DataFrame([{
            "ID": item.item_id,
            "Name": item.name.get(),
            "Category": item.category,
            "Base USD": item.base_usd,
            "Unit": item.unit
        } for item in items.values()]), use_container_width=True, hide_index=True)

        to_delete = st.selectbox("Delete cost item", options=[""] + list(items.keys()))
        if to_delete and st.button("🗑️ Delete"):
            delete_cost_item(to_delete)
            st.rerun()

    with st.form("cost_item"):
        col1, col2 = st.columns(2)
        with col1:
            item_id = st.text_input("Item ID *")
            name = st.text_input("Name (English) *")
            category = st.selectbox("Category", options=COST_CATEGORIES)
        with col2:
            base_usd = st.number_input("Base cost (USD)", min_value=0.0, value=0.0)
            unit = st.text_input("Unit", value="unit")

        if st.form_submit_button("💾 Save Cost Item", type="primary"):
            try:
                upsert_cost_item(CostItem(item_id=item_id.strip(), name=LocalizedText.parse(name),
                                          category=category, base_usd=base_usd, unit=unit))
                st.success(f"Saved cost item {item_id}")
                st.rerun()
            except ValidationError as e:
                for error in e.errors:
                    st.error(error)


def hazards_tab():
    """Hazard list with per-locale names."""
    hazards = {h.hazard_id: h for h in get_hazards()}

    if hazards:
        st.dataframe(pd.DataFrame([{
            "ID": h.hazard_id,
            "Category": h.category,
            **{f"Name ({locale})": h.name.values.get(locale, "") for locale in SUPPORTED_LOCALES}
        } for h in hazards.values()]), use_container_width=True, hide_index=True)

    selected = st.selectbox("Edit hazard", options=[""] + list(hazards.keys()),
                            format_func=lambda h: h or "➕ New hazard")
    existing = hazards.get(selected)
    categories = list(HAZARD_CATEGORIES.keys())

    with st.form(f"hazard_{selected or 'new'}"):
        col1, col2 = st.columns(2)
        with col1:
            hazard_id = st.text_input("Hazard ID *", value=selected, disabled=bool(existing))
            category = st.selectbox(
                "Category", options=categories,
                index=categories.index(existing.category) if existing and existing.category in categories else 0
            )
        with col2:
            names = {
                locale: st.text_input(f"Name ({locale})" + (" *" if locale == DEFAULT_LOCALE else ""),
                                      value=existing.name.values.get(locale, "") if existing else "")
                for locale in SUPPORTED_LOCALES
            }

        if st.form_submit_button("💾 Save Hazard", type="primary"):
            try:
                canonical = upsert_hazard(selected or hazard_id, names, category)
                st.success(f"Saved hazard {canonical}")
                st.rerun()
            except ValidationError as e:
                for error in e.errors:
                    st.error(error)


def _english_update(existing, text):
    """Replace the default-locale text and keep the other translations."""
    values = dict(existing.values) if existing else {}
    values[DEFAULT_LOCALE] = text
    return values


def _steps_frame(strategy):
    rows = [{
        "step_id": step.step_id,
        "title": step.title.get(),
        "phase": step.phase,
        "timeframe": step.timeframe,
        "cost_items": format_cost_links(step.cost_items)
    } for step in (strategy.action_steps if strategy else [])]
    return pd.DataFrame(rows, columns=STEP_EDITOR_COLUMNS)


def strategy_cost_preview(strategy, cost_items):
    """Cost and time of the strategy being edited, for one country."""
    st.markdown("**Cost preview**")
    multipliers = get_country_multipliers()
    country_code = st.selectbox("Country", options=sorted(multipliers.keys()) or ["US"],
                                key="strategy_preview_country")

    cost = calculate_strategy_cost(strategy.action_steps, country_code, multipliers, cost_items)
    st.metric("Cost (USD)", format_cost(cost.total_usd, "USD"))
    st.metric(f"Cost ({cost.currency_code})",
              format_cost(cost.total_local, cost.currency_code, cost.currency_symbol))
    st.metric("Estimated Time", format_hours(cost.calculated_hours))

    if cost.item_breakdown:
        st.dataframe(pd.DataFrame([{
            "Item": entry["name"],
            "Qty": entry["quantity"],
            "Cost (USD)": format_cost(entry["total_usd"], "USD")
        } for entry in cost.item_breakdown]), use_container_width=True, hide_index=True)


def strategy_editor_tab():
    """Create or edit a strategy and its action steps."""
    strategies = {s.strategy_id: s for s in get_strategies(active_only=False)}
    cost_items = get_cost_items()

    selected = st.selectbox("Edit strategy", options=[""] + list(strategies.keys()),
                            format_func=lambda s: strategies[s].title.get() if s else "➕ New strategy")
    existing = strategies.get(selected)
    key = selected or "new"

    risk_options = sorted(get_known_hazard_ids() | {"all_hazards"} |
                          set(existing.applicable_risks if existing else []))
    tier = existing.tier if existing else "recommended"
    tier_index = STRATEGY_TIERS.index(tier) if tier in STRATEGY_TIERS else 0

    col_form, col_preview = st.columns([2, 1])

    with col_form:
        col1, col2 = st.columns(2)
        with col1:
            strategy_id = st.text_input("Strategy ID *", value=selected, disabled=bool(existing),
                                        key=f"strategy_id_{key}")
            title = st.text_input("Title (English) *", value=existing.title.get() if existing else "",
                                  key=f"strategy_title_{key}")
            tier = st.selectbox("Tier", options=STRATEGY_TIERS, index=tier_index, key=f"strategy_tier_{key}")
        with col2:
            applicable_risks = st.multiselect(
                "Applicable risks", options=risk_options,
                default=existing.applicable_risks if existing else [],
                format_func=display_name, key=f"strategy_risks_{key}",
                help="Leave empty or pick All Hazards for a strategy that applies to every hazard"
            )
            description = st.text_area("Description (English)",
                                       value=existing.description.get() if existing else "",
                                       key=f"strategy_description_{key}")
            is_active = st.checkbox("Active", value=existing.is_active if existing else True,
                                    key=f"strategy_active_{key}")

        st.markdown("**Action steps**")
        st.caption("Cost items are `item_id:quantity`, comma separated. Available: " +
                   (", ".join(cost_items.keys()) or "none yet"))
        edited = st.data_editor(
            _steps_frame(existing),
            num_rows="dynamic",
            use_container_width=True,
            hide_index=True,
            key=f"strategy_steps_{key}",
            column_config={
                "step_id": st.column_config.TextColumn("Step ID", required=True),
                "title": st.column_config.TextColumn("Title (English)"),
                "phase": st.column_config.SelectboxColumn("Phase", options=ACTION_PHASES, default="before"),
                "timeframe": st.column_config.TextColumn("Timeframe"),
                "cost_items": st.column_config.TextColumn("Cost items")
            }
        )

    old_steps = {s.step_id: s for s in existing.action_steps} if existing else {}
    strategy = None
    try:
        steps = []
        for row in edited.fillna("").to_dict("records"):
            step_id = str(row["step_id"]).strip()
            if not step_id:
                continue
            old = old_steps.get(step_id)
            steps.append({
                "step_id": step_id,
                "title": _english_update(old.title if old else None, str(row["title"]).strip()),
                "phase": row["phase"],
                "timeframe": str(row["timeframe"]).strip(),
                "costs": parse_cost_links(str(row["cost_items"]))
            })
        strategy = strategy_from_record({
            "strategy_id": (selected or strategy_id).strip(),
            "title": _english_update(existing.title if existing else None, title.strip()),
            "description": _english_update(existing.description if existing else None, description.strip()),
            "applicable_risks": applicable_risks,
            "tier": tier,
            "is_active": is_active,
            "steps": steps
        })
    except ValueError as e:
        with col_form:
            st.error(str(e))

    with col_preview:
        if strategy is not None:
            strategy_cost_preview(strategy, cost_items)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save Strategy", type="primary", disabled=strategy is None):
            try:
                save_strategy(strategy)
                st.success(f"Saved strategy {strategy.strategy_id}")
                st.rerun()
            except ValidationError as e:
                for error in e.errors:
                    st.error(error)
    with col2:
        if existing and st.button("🗑️ Delete Strategy"):
            delete_strategy(existing.strategy_id)
            st.rerun()


def strategy_costs_tab():
    """Live cost preview of every strategy for one country."""
    multipliers = get_country_multipliers()
    country_code = st.selectbox("Preview country", options=sorted(multipliers.keys()) or ["US"])
    cost_items = get_cost_items()

    rows = []
    for strategy in get_strategies(active_only=False):
        cost = calculate_strategy_cost(strategy.action_steps, country_code, multipliers, cost_items)
        rows.append({
            "Strategy": strategy.title.get(),
            "Tier": strategy.tier,
            "Steps": len(strategy.action_steps),
            "Steps without timeframe": check_step_timeframes(strategy),
            "Cost (USD)": format_cost(cost.total_usd, "USD"),
            "Cost (Local)": format_cost(cost.total_local, cost.currency_code, cost.currency_symbol),
            "Time": format_hours(cost.calculated_hours)
        })

    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.info("No strategies in the catalog yet.")


def coverage_tab():
    """Hazards with no strategies and strategies with unknown hazard tags."""
    hazards = get_hazards()
    strategies = get_strategies()

    report = coverage_report([h.hazard_id for h in hazards], strategies)
    gaps = [r for r in report if r['is_gap']]
    if gaps:
        st.warning(f"{len(gaps)} hazard(s) have no strategies")
    else:
        st.success("Every hazard has at least one strategy")

    st.dataframe(pd.DataFrame([{
        "Hazard": r['risk_id'],
        "Strategies": r['strategy_count'],
        "Strategy IDs": ", ".join(r['strategy_ids'])
    } for r in report]), use_container_width=True, hide_index=True)

    problems = find_non_canonical_references(strategies, get_known_hazard_ids())
    if problems:
        st.error("Strategies referencing unknown hazards")
        for strategy_id, bad in problems.items():
            st.markdown(f"- **{strategy_id}**: {', '.join(bad)}")


def main():
    st.title("🛠️ Admin Catalog")

    tab1, tab2, tab3, tab4, tab5, tab6 = st.tabs([
        "⚠️ Hazards",
        "🛡️ Strategies",
        "🌎 Country Multipliers",
        "📦 Cost Items",
        "💰 Strategy Costs",
        "📋 Coverage Audit"
    ])

    with tab1:
        hazards_tab()

    with tab2:
        strategy_editor_tab()

    with tab3:
        country_multipliers_tab()

    with tab4:
        cost_items_tab()

    with tab5:
        strategy_costs_tab()

    with tab6:
        coverage_tab()


if __name__ == "__main__":
    main()
