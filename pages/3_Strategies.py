"""
BCP Builder - Strategies Module
===============================
Recommend mitigation strategies for each selected risk, with itemized
costs in local currency and an implementation time estimate.

Output: saved plan snapshot and a downloadable action workbook
"""

import streamlit as st
import pandas as pd
import plotly.express as px
import sys
from pathlib import Path

APP_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(APP_DIR))

from utils.constants import NO_STRATEGY_MESSAGE, DEFAULT_COUNTRY, SUPPORTED_LOCALES
from utils.helpers import format_compact_currency, export_timestamp
from modules.database import (
    init_database, get_hazards, get_strategies, get_country_multipliers, get_cost_items, save_plan
)
from modules.models import RiskSelection
from modules.matching import match
from modules.costs import calculate_plan_cost, format_cost
from modules.risk_ids import display_name
from modules.timeframes import format_hours
from modules.export import build_action_workbook

st.set_page_config(page_title="Strategies | BCP Builder", page_icon="🛡️", layout="wide")

init_database()

# Initialize session state
if 'business_profile' not in st.session_state:
    st.session_state.business_profile = {}
if 'risk_selection' not in st.session_state:
    st.session_state.risk_selection = RiskSelection()


def strategy_card(strategy, cost):
    """One strategy with its action steps."""
    with st.expander(f"{strategy.title.get()} ({strategy.tier})"):
        if strategy.description:
            st.markdown(strategy.description.get())

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Cost (USD)", format_cost(cost.total_usd, "USD"))
        with col2:
            st.metric(f"Cost ({cost.currency_code})",
                      format_cost(cost.total_local, cost.currency_code, cost.currency_symbol))
        with col3:
            st.metric("Estimated Time", format_hours(cost.calculated_hours))

        steps = pd.DataFrame([{
            "Step": s['title'],
            "Phase": s['phase'],
            "Timeframe": s['timeframe'] or "-",
            "Cost": format_cost(s['local_amount'], cost.currency_code, cost.currency_symbol)
        } for s in cost.step_breakdown])
        if not steps.empty:
            st.dataframe(steps, use_container_width=True, hide_index=True)


def recommendations(result, plan_cost):
    """Strategies grouped by the risk that triggered them."""
    st.subheader("🛡️ Recommended Strategies")
    costs = plan_cost['strategies']

    for risk_id, strategies in result.by_risk.items():
        st.markdown(f"### {display_name(risk_id)}")
        if not strategies:
            st.warning(NO_STRATEGY_MESSAGE)
            continue
        for strategy in strategies:
            strategy_card(strategy, costs[strategy.strategy_id])

    if result.universal:
        st.markdown("### 🌐 For All Hazards")
        for strategy in result.universal:
            strategy_card(strategy, costs[strategy.strategy_id])


def cost_summary(plan_cost):
    """Plan totals and per-phase chart."""
    st.subheader("💰 Plan Cost")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total (USD)", format_cost(plan_cost['total_usd'], "USD"))
    with col2:
        st.metric(f"Total ({plan_cost['currency_code']})",
                  format_compact_currency(plan_cost['total_local'], plan_cost['currency_code'],
                                          plan_cost['currency_symbol']))
    with col3:
        st.metric("Estimated Effort", format_hours(plan_cost['calculated_hours']))

    phase_totals = {}
    for cost in plan_cost['strategies'].values():
        for phase, amount in cost.by_phase.items():
            phase_totals[phase] = phase_totals.get(phase, 0) + amount

    if any(phase_totals.values()):
        df = pd.DataFrame({"Phase": list(phase_totals.keys()), "Cost (USD)": list(phase_totals.values())})
        fig = px.bar(df, x="Phase", y="Cost (USD)", title="Cost by Phase")
        st.plotly_chart(fig, use_container_width=True)


def main():
    st.title("🛡️ Strategies")

    profile = st.session_state.business_profile
    selection = st.session_state.risk_selection
    if not profile or not selection:
        st.warning("Complete your business profile and select risks first")
        if st.button("Go to Risk Selection"):
            st.switch_page("pages/2_Risk_Selection.py")
        return

    country_code = profile.get('country_code', DEFAULT_COUNTRY)
    hazard_names = {h.hazard_id: h.name for h in get_hazards()}
    multipliers = get_country_multipliers()
    cost_items = get_cost_items()

    result = match(selection.risk_ids(), get_strategies())
    plan_strategies = result.strategies() + result.universal
    plan_cost = calculate_plan_cost(plan_strategies, country_code, multipliers, cost_items)

    if result.coverage_gaps:
        st.info("Some risks have no strategies yet: " +
                ", ".join(display_name(r) for r in result.coverage_gaps))

    cost_summary(plan_cost)
    st.divider()
    recommendations(result, plan_cost)
    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        locale = st.selectbox("Workbook language", options=SUPPORTED_LOCALES)
        workbook = build_action_workbook(profile['business_name'], country_code, result, plan_cost,
                                         locale, hazard_names)
        st.download_button(
            label="⬇️ Download Action Workbook (XLSX)",
            data=workbook,
            file_name=f"{profile['business_name']}_BCP_{export_timestamp()}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    with col2:
        if st.button("💾 Save Plan", type="primary"):
            plan_id = save_plan(profile['business_name'], country_code, selection,
                                plan_cost['strategies'].keys(), plan_cost)
            st.success(f"Plan saved (id={plan_id})")


if __name__ == "__main__":
    main()
