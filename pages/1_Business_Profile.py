"""
BCP Builder - Business Profile Module
=====================================
Collect the business name, country and the simple yes/no questions that
drive risk scoring.
"""

import streamlit as st
import sys
from pathlib import Path

# Add app directory to path
APP_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(APP_DIR))

from utils.constants import (
    DEFAULT_COUNTRY, CUSTOMER_BASE_OPTIONS, POWER_DEPENDENCY_OPTIONS, DIGITAL_DEPENDENCY_OPTIONS
)
from modules.database import init_database, get_country_multipliers
from modules.risk_scoring import convert_simplified_inputs

st.set_page_config(page_title="Business Profile | BCP Builder", page_icon="🏢", layout="wide")

init_database()

# Initialize session state
if 'business_profile' not in st.session_state:
    st.session_state.business_profile = {}


def business_profile_form():
    """Business information form."""
    st.subheader("📋 Business Profile")

    profile = st.session_state.business_profile
    countries = sorted(get_country_multipliers().keys()) or [DEFAULT_COUNTRY]
    current_country = profile.get('country_code', DEFAULT_COUNTRY)

    with st.form("business_profile"):
        col1, col2 = st.columns(2)

        with col1:
            name = st.text_input(
                "Business Name *",
                value=profile.get('business_name', ""),
                placeholder="Enter business name"
            )

            country_code = st.selectbox(
                "Country",
                options=countries,
                index=countries.index(current_country) if current_country in countries else 0
            )

            customer_base = st.radio(
                "Who are your customers?",
                options=list(CUSTOMER_BASE_OPTIONS.keys()),
                format_func=lambda k: CUSTOMER_BASE_OPTIONS[k]['label'],
                index=list(CUSTOMER_BASE_OPTIONS.keys()).index(profile.get('customer_base', 'mainly_locals'))
            )

            power_dependency = st.radio(
                "What happens when the power goes out?",
                options=list(POWER_DEPENDENCY_OPTIONS.keys()),
                format_func=lambda k: POWER_DEPENDENCY_OPTIONS[k]['label'],
                index=list(POWER_DEPENDENCY_OPTIONS.keys()).index(profile.get('power_dependency', 'can_operate'))
            )

            digital_dependency = st.radio(
                "How much do you rely on computers?",
                options=list(DIGITAL_DEPENDENCY_OPTIONS.keys()),
                format_func=lambda k: DIGITAL_DEPENDENCY_OPTIONS[k]['label'],
                index=list(DIGITAL_DEPENDENCY_OPTIONS.keys()).index(profile.get('digital_dependency', 'not_used'))
            )

        with col2:
            is_coastal = st.checkbox("Within 5km of the coast", value=profile.get('is_coastal', False))
            is_urban = st.checkbox("In a town or city", value=profile.get('is_urban', False))
            imports_from_overseas = st.checkbox("We import supplies from overseas",
                                                value=profile.get('imports_from_overseas', False))
            sells_perishable = st.checkbox("We sell perishable goods", value=profile.get('sells_perishable', False))
            minimal_inventory = st.checkbox("We keep minimal stock", value=profile.get('minimal_inventory', False))
            expensive_equipment = st.checkbox("We own expensive equipment",
                                              value=profile.get('expensive_equipment', False))

        submitted = st.form_submit_button("💾 Save Profile", type="primary", use_container_width=True)

    if submitted:
        if not name.strip():
            st.error("Business name is required")
            return

        st.session_state.business_profile = {
            'business_name': name.strip(),
            'country_code': country_code,
            'customer_base': customer_base,
            'power_dependency': power_dependency,
            'digital_dependency': digital_dependency,
            'is_coastal': is_coastal,
            'is_urban': is_urban,
            'imports_from_overseas': imports_from_overseas,
            'sells_perishable': sells_perishable,
            'minimal_inventory': minimal_inventory,
            'expensive_equipment': expensive_equipment,
        }
        st.success(f"Profile saved for {name.strip()}")


def characteristics_preview():
    """Show the characteristics derived from the answers."""
    profile = st.session_state.business_profile
    if not profile:
        return

    st.subheader("🔍 What this tells us")
    characteristics = convert_simplified_inputs(profile)
    st.json(characteristics, expanded=False)


def main():
    st.title("🏢 Business Profile")

    business_profile_form()
    characteristics_preview()

    st.divider()
    if st.session_state.business_profile and st.button("Next: Risk Selection →"):
        st.switch_page("pages/2_Risk_Selection.py")


if __name__ == "__main__":
    main()
