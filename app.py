"""
BCP Builder - Business Continuity Planning
==========================================
Main application entry point.

Run with: streamlit run app.py
"""

import logging
import streamlit as st
import sys
from pathlib import Path

# Add app directory to path for imports
APP_DIR = Path(__file__).parent
sys.path.insert(0, str(APP_DIR))

from utils.constants import APP_NAME, APP_VERSION, APP_SUBTITLE, HAZARD_CATEGORIES, LOG_LEVEL
from modules.database import init_database, get_hazards, get_strategies, get_cost_items, get_plans
from modules.demo_data import seed_demo_catalog
from modules.matching import coverage_report
from modules.risk_ids import display_name

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Page configuration
st.set_page_config(
    page_title=f"{APP_NAME}",
    page_icon="\U0001f6e1",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize database
init_database()

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1F4E79;
        margin-bottom: 0;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #666;
        margin-top: 0;
    }
    .stButton > button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def main():
    """Main application page - Home/Dashboard."""

    # Header
    st.markdown(f'<p class="main-header">\U0001f6e1 {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown(f'<p class="sub-header">{APP_SUBTITLE} v{APP_VERSION}</p>', unsafe_allow_html=True)

    st.divider()

    hazards = get_hazards()
    strategies = get_strategies()

    if not hazards and not strategies:
        st.info("The reference catalog is empty.")
        if st.button("➕ Load Demo Catalog", type="primary"):
            seed_demo_catalog()
            st.rerun()

    # Overview metrics
    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("⚠️ Hazards", len(hazards))

    with col2:
        st.metric("\U0001f6e1 Strategies", len(strategies))

    with col3:
        st.metric("\U0001f4e6 Cost Items", len(get_cost_items()))

    with col4:
        st.metric("\U0001f4cb Saved Plans", len(get_plans()))

    st.divider()

    col_left, col_right = st.columns([2, 1])

    with col_left:
        st.subheader("\U0001f4cd Quick Start Guide")

        st.markdown("""
        **Step 1: Business Profile** \U0001f3e2
        - Enter your business name and country
        - Answer a few questions about customers, power and supplies

        **Step 2: Risk Selection** ⚡
        - Rate how exposed your location is to each hazard
        - Review suggested risks and confirm the ones to plan for

        **Step 3: Strategies** \U0001f6e1
        - See recommended strategies for every selected risk
        - Review costs in your local currency and time to implement
        - Download your action workbook and save the plan

        **Admin: Catalog** \U0001f6e0
        - Maintain country multipliers, cost items and coverage
        """)

        if st.button("Start: Business Profile →"):
            st.switch_page("pages/1_Business_Profile.py")

    with col_right:
        st.subheader("\U0001f4ca Hazard Categories")

        for category, info in HAZARD_CATEGORIES.items():
            count = len([h for h in hazards if h.category == category])
            st.markdown(f"""
            <div style="background-color: {info['color']}20; padding: 12px;
                        border-left: 4px solid {info['color']}; border-radius: 4px; margin: 8px 0;">
                <strong>{info['icon']} {category.title()}</strong><br>
                <small>{info['description']}</small><br>
                <span style="color: {info['color']}; font-weight: bold;">{count} hazards</span>
            </div>
            """, unsafe_allow_html=True)

        gaps = [r for r in coverage_report([h.hazard_id for h in hazards], strategies) if r['is_gap']]
        if gaps:
            st.warning("No strategies yet for: " + ", ".join(display_name(r['risk_id']) for r in gaps))

    # Footer
    st.divider()
    st.caption(f"{APP_NAME} v{APP_VERSION}")


if __name__ == "__main__":
    main()
