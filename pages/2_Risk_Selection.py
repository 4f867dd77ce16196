"""
BCP Builder - Risk Selection Module
===================================
Rate how exposed the business location is to each hazard, get a suggested
selection from the risk scoring rules, then confirm the risks to plan for.
"""

import streamlit as st
import pandas as pd
import sys
from pathlib import Path

APP_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(APP_DIR))

from utils.constants import HAZARD_CATEGORIES, DEFAULT_SELECTION_THRESHOLD
from utils.helpers import get_risk_level_label
from modules.database import init_database, get_hazards
from modules.models import RiskSelection
from modules.risk_scoring import (
    convert_simplified_inputs, apply_multipliers, build_risk_selection, DEFAULT_MULTIPLIER_RULES
)

st.set_page_config(
    page_title="Risk Selection | BCP Builder",
    page_icon="⚡",
    layout="wide"
)

init_database()

# Initialize session state
if 'business_profile' not in st.session_state:
    st.session_state.business_profile = {}

if 'location_levels' not in st.session_state:
    st.session_state.location_levels = {}

if 'risk_selection' not in st.session_state:
    st.session_state.risk_selection = RiskSelection()


def location_levels_interface(hazards):
    """Sliders for per-hazard location exposure."""
    st.subheader("🌍 Location Exposure")
    st.markdown("Rate how often each hazard affects your area (0 = never, 10 = every year).")

    for category, info in HAZARD_CATEGORIES.items():
        category_hazards = [h for h in hazards if h.category == category]
        if not category_hazards:
            continue

        st.markdown(f"**{info['icon']} {category.title()}** - {info['description']}")
        cols = st.columns(3)
        for i, hazard in enumerate(category_hazards):
            with cols[i % 3]:
                st.session_state.location_levels[hazard.hazard_id] = st.slider(
                    hazard.name.get(),
                    min_value=0,
                    max_value=10,
                    value=st.session_state.location_levels.get(hazard.hazard_id, 0),
                    key=f"level_{hazard.hazard_id}"
                )


def risk_selection_interface(hazards):
    """Suggested and confirmed risk selection."""
    characteristics = convert_simplified_inputs(st.session_state.business_profile)
    levels = st.session_state.location_levels

    st.subheader("🎯 Suggested Risks")
    threshold = st.slider("Minimum score to suggest", 0, 10, DEFAULT_SELECTION_THRESHOLD)

    if st.button("✨ Apply Suggestions"):
        st.session_state.risk_selection = build_risk_selection(
            levels, characteristics, DEFAULT_MULTIPLIER_RULES, threshold
        )
        st.rerun()

    rows = []
    for hazard in hazards:
        level = levels.get(hazard.hazard_id, 0)
        scored = apply_multipliers(level, hazard.hazard_id, characteristics, DEFAULT_MULTIPLIER_RULES)
        rows.append({
            "Hazard": hazard.name.get(),
            "Location Level": level,
            "Score": scored['final_score'],
            "Level": get_risk_level_label(scored['final_score']),
            "Why": scored['reasoning'],
            "Selected": hazard.hazard_id in st.session_state.risk_selection
        })

    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.subheader("✅ Confirm Risks")
    selection = st.session_state.risk_selection
    for hazard in hazards:
        is_selected = hazard.hazard_id in selection
        new_value = st.checkbox(hazard.name.get(), value=is_selected, key=f"risk_{hazard.hazard_id}")
        if new_value != is_selected:
            if new_value:
                selection.add(hazard.hazard_id)
            else:
                selection.remove(hazard.hazard_id)


def main():
    st.title("⚡ Risk Selection")

    if not st.session_state.business_profile:
        st.warning("Complete your business profile first")
        if st.button("Go to Business Profile"):
            st.switch_page("pages/1_Business_Profile.py")
        return

    hazards = get_hazards()
    if not hazards:
        st.warning("No hazards in the catalog yet. Ask an administrator to add them.")
        if st.button("Go to Admin Catalog"):
            st.switch_page("pages/4_Admin_Catalog.py")
        return

    tab1, tab2 = st.tabs(["🌍 Location", "🎯 Select Risks"])

    with tab1:
        location_levels_interface(hazards)

    with tab2:
        risk_selection_interface(hazards)

    st.divider()
    st.caption(f"{len(st.session_state.risk_selection)} risk(s) selected")
    if st.session_state.risk_selection and st.button("Next: Strategies →"):
        st.switch_page("pages/3_Strategies.py")


if __name__ == "__main__":
    main()
