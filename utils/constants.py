"""
BCP Builder - Configuration Constants
=====================================
Edit this file to change application settings without modifying code.
Deployment-specific values can be overridden with environment variables.
"""

import os

# Application Settings
APP_NAME = "BCP Builder"
APP_VERSION = "1.0.0"
APP_SUBTITLE = "Business Continuity Planning for Small Businesses"

# Database Settings
DATABASE_NAME = "bcp_builder.db"
DATABASE_PATH = os.environ.get("BCP_DATABASE_PATH", "")

# Logging
LOG_LEVEL = os.environ.get("BCP_LOG_LEVEL", "INFO")

# Locales
DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ["en", "es", "fr"]

# Default Values
DEFAULT_COUNTRY = os.environ.get("BCP_DEFAULT_COUNTRY", "JM")
DEFAULT_CURRENCY = "USD"
CURRENCY_SYMBOLS = {
    "USD": "$",
    "JMD": "J$",
    "TTD": "TT$",
    "BBD": "Bds$",
    "XCD": "EC$",
    "BSD": "B$",
    "HTG": "G",
    "EUR": "€",
    "GBP": "£",
    "CAD": "CA$"
}

# Hazard Categories with colors
HAZARD_CATEGORIES = {
    "natural": {"color": "#FFC000", "icon": "🌀", "description": "Storms, floods, earthquakes, drought"},
    "technological": {"color": "#5B9BD5", "icon": "⚡", "description": "Power, fire, cyber incidents"},
    "human": {"color": "#70AD47", "icon": "👥", "description": "Unrest, theft, health emergencies"},
    "economic": {"color": "#7030A0", "icon": "📉", "description": "Supply chain, downturns"}
}

# Canonical hazards - the single source of truth for risk ids
CANONICAL_HAZARDS = {
    "hurricane": {"name": "Hurricane / Tropical Storm", "category": "natural"},
    "flood": {"name": "Flooding", "category": "natural"},
    "drought": {"name": "Drought", "category": "natural"},
    "earthquake": {"name": "Earthquake", "category": "natural"},
    "landslide": {"name": "Landslide / Mudslide", "category": "natural"},
    "power_outage": {"name": "Power Outage", "category": "technological"},
    "fire": {"name": "Fire", "category": "technological"},
    "cybersecurity_incident": {"name": "Cybersecurity Incident / Data Breach", "category": "technological"},
    "civil_unrest": {"name": "Civil Unrest / Protests", "category": "human"},
    "break_in_theft": {"name": "Break-ins & Theft", "category": "human"},
    "pandemic": {"name": "Pandemic / Health Emergency", "category": "human"},
    "supply_disruption": {"name": "Supply Chain Disruption", "category": "economic"},
    "economic_downturn": {"name": "Economic Downturn / Tourism Decline", "category": "economic"}
}

# Aliases that do not normalize mechanically onto a canonical id.
# Keys are snake_case tokens; values must be canonical ids and never keys.
RISK_ID_SYNONYMS = {
    "hurricane_tropical_storm": "hurricane",
    "tropical_storm": "hurricane",
    "flooding": "flood",
    "floods": "flood",
    "flash_flood": "flood",
    "mudslide": "landslide",
    "power_failure": "power_outage",
    "blackout": "power_outage",
    "wildfire": "fire",
    "cyber_attack": "cybersecurity_incident",
    "cyberattack": "cybersecurity_incident",
    "cybersecurity": "cybersecurity_incident",
    "data_breach": "cybersecurity_incident",
    "civil_disturbance": "civil_unrest",
    "protest": "civil_unrest",
    "protests": "civil_unrest",
    "theft": "break_in_theft",
    "crime": "break_in_theft",
    "break_in": "break_in_theft",
    "burglary": "break_in_theft",
    "theft_vandalism": "break_in_theft",
    "pandemic_disease": "pandemic",
    "pandemic_impact": "pandemic",
    "health_emergency": "pandemic",
    "epidemic": "pandemic",
    "supply_chain_disruption": "supply_disruption",
    "supply_chain": "supply_disruption",
    "recession": "economic_downturn",
    "tourism_decline": "economic_downturn"
}

# Strategies tagged with one of these apply to every hazard
CATCH_ALL_RISK_IDS = {"all_hazards", "all", "any", "general"}

# Shorter words ("in", "of") are ignored by the shared-word match rule.
MIN_MATCH_TOKEN_LENGTH = 3

# Cost item categories (each has a per-country multiplier)
COST_CATEGORIES = ["construction", "equipment", "service", "supplies"]

# Strategy priority tiers
STRATEGY_TIERS = ["essential", "recommended", "optional"]

# Action step phases, plus the legacy names still found in older records
ACTION_PHASES = ["before", "during", "after"]
LEGACY_PHASES = {
    "immediate": "before",
    "short_term": "before",
    "medium_term": "during",
    "long_term": "after",
    "prevention": "before",
    "preparation": "before",
    "response": "during",
    "recovery": "after"
}

# Timeframe parsing
HOURS_PER_UNIT = {
    "minute": 1 / 60,
    "hour": 1,
    "day": 8,
    "week": 40,
    "month": 160,
    "year": 1920
}
NOMINAL_TIMEFRAME_HOURS = 1
NOMINAL_TIMEFRAME_PHRASES = [
    "start this week",
    "ongoing",
    "asap",
    "immediately",
    "as needed"
]

# Risk Level Thresholds (scores are on a 0-10 scale)
RISK_LEVELS = {
    "CRITICAL": {"min": 8, "color": "#C92A2A", "label": "Critical"},
    "HIGH": {"min": 6, "color": "#FF6B6B", "label": "High"},
    "MEDIUM": {"min": 4, "color": "#FFE066", "label": "Medium"},
    "LOW": {"min": 2, "color": "#74C0FC", "label": "Low"},
    "VERY_LOW": {"min": 0, "color": "#69DB7C", "label": "Very Low"}
}
MAX_RISK_SCORE = 10
DEFAULT_SELECTION_THRESHOLD = 4

# Wizard answer mappings for business characteristics
CUSTOMER_BASE_OPTIONS = {
    "mainly_tourists": {"label": "Mainly tourists", "tourism_share": 80, "local_customer_share": 15},
    "mix": {"label": "A mix of tourists and locals", "tourism_share": 40, "local_customer_share": 50},
    "mainly_locals": {"label": "Mainly locals", "tourism_share": 10, "local_customer_share": 85}
}
POWER_DEPENDENCY_OPTIONS = {
    "can_operate": {"label": "We can operate without power", "value": 10},
    "partially": {"label": "We can partially operate", "value": 50},
    "cannot_operate": {"label": "We cannot operate without power", "value": 95}
}
DIGITAL_DEPENDENCY_OPTIONS = {
    "not_used": {"label": "We rarely use computers", "value": 10},
    "helpful": {"label": "Helpful but not essential", "value": 50},
    "essential": {"label": "Essential to daily operations", "value": 95}
}
FLOOD_PRONE_LEVEL = 7

# Export Settings
WORKBOOK_SHEETS = [
    "Summary",
    "Strategies",
    "Action Steps"
]
NO_STRATEGY_MESSAGE = "No strategies found for this risk"
