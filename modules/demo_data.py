"""
Demo data seeding for BCP Builder.
Creates a starter reference catalog (hazards, cost items, country
multipliers and strategies with action steps) so the wizard is usable
immediately after startup.
"""
import logging

from utils.constants import CANONICAL_HAZARDS
from modules.models import LocalizedText, CostItem, CountryMultiplier, strategy_from_record
from modules.validation import ValidationError
from modules.database import (
    get_hazards, upsert_hazard, get_cost_items, upsert_cost_item,
    get_country_multipliers, upsert_country_multiplier, get_strategies, save_strategy
)

logger = logging.getLogger(__name__)

DEMO_HAZARD_TRANSLATIONS = {
    "hurricane": {"es": "Huracán / Tormenta tropical", "fr": "Ouragan / Tempête tropicale"},
    "flood": {"es": "Inundación", "fr": "Inondation"},
    "drought": {"es": "Sequía", "fr": "Sécheresse"},
    "earthquake": {"es": "Terremoto", "fr": "Tremblement de terre"},
    "landslide": {"es": "Deslizamiento de tierra", "fr": "Glissement de terrain"},
    "power_outage": {"es": "Corte de electricidad", "fr": "Panne de courant"},
    "fire": {"es": "Incendio", "fr": "Incendie"},
    "cybersecurity_incident": {"es": "Incidente de ciberseguridad", "fr": "Incident de cybersécurité"},
    "civil_unrest": {"es": "Disturbios civiles", "fr": "Troubles civils"},
    "break_in_theft": {"es": "Robo con allanamiento", "fr": "Cambriolage et vol"},
    "pandemic": {"es": "Pandemia / Emergencia sanitaria", "fr": "Pandémie / Urgence sanitaire"},
    "supply_disruption": {"es": "Interrupción del suministro", "fr": "Rupture d'approvisionnement"},
    "economic_downturn": {"es": "Recesión económica", "fr": "Ralentissement économique"},
}

DEMO_MULTIPLIERS = [
    {"country_code": "JM", "construction": 1.2, "equipment": 1.3, "service": 0.9, "supplies": 1.25,
     "currency_code": "JMD", "currency_symbol": "J$", "exchange_rate_usd": 156.5},
    {"country_code": "BB", "construction": 1.35, "equipment": 1.4, "service": 1.1, "supplies": 1.3,
     "currency_code": "BBD", "currency_symbol": "Bds$", "exchange_rate_usd": 2.0},
    {"country_code": "TT", "construction": 1.1, "equipment": 1.2, "service": 0.95, "supplies": 1.15,
     "currency_code": "TTD", "currency_symbol": "TT$", "exchange_rate_usd": 6.8},
    {"country_code": "BS", "construction": 1.45, "equipment": 1.35, "service": 1.2, "supplies": 1.4,
     "currency_code": "BSD", "currency_symbol": "B$", "exchange_rate_usd": 1.0},
    {"country_code": "US", "construction": 1.0, "equipment": 1.0, "service": 1.0, "supplies": 1.0,
     "currency_code": "USD", "currency_symbol": "$", "exchange_rate_usd": 1.0},
]

DEMO_COST_ITEMS = [
    {"item_id": "generator_5kw", "name": {"en": "Portable generator (5kW)", "es": "Generador portátil (5kW)"},
     "category": "equipment", "base_usd": 1200, "base_usd_min": 900, "base_usd_max": 1600, "unit": "unit"},
    {"item_id": "fuel_storage", "name": {"en": "Fuel storage container", "es": "Contenedor de combustible"},
     "category": "supplies", "base_usd": 45, "unit": "container"},
    {"item_id": "hurricane_shutters", "name": {"en": "Hurricane shutters", "fr": "Volets anticycloniques"},
     "category": "construction", "base_usd": 350, "base_usd_min": 250, "base_usd_max": 600, "unit": "window"},
    {"item_id": "sandbags", "name": {"en": "Sandbags (pack of 20)"},
     "category": "supplies", "base_usd": 40, "unit": "pack"},
    {"item_id": "electrician_service", "name": {"en": "Licensed electrician visit"},
     "category": "service", "base_usd": 150, "unit": "visit"},
    {"item_id": "cloud_backup", "name": {"en": "Cloud backup subscription (1 year)"},
     "category": "service", "base_usd": 120, "unit": "year"},
    {"item_id": "fire_extinguisher", "name": {"en": "Fire extinguisher"},
     "category": "equipment", "base_usd": 60, "unit": "unit"},
    {"item_id": "first_aid_kit", "name": {"en": "First aid kit"},
     "category": "supplies", "base_usd": 35, "unit": "kit"},
]

DEMO_STRATEGIES = [
    {
        "strategy_id": "backup_power",
        "title": {"en": "Backup Power Supply", "es": "Suministro de energía de respaldo"},
        "description": {"en": "Keep critical equipment running during outages."},
        "applicable_risks": ["hurricane", "flood", "power_outage"],
        "tier": "essential",
        "steps": [
            {"step_id": "backup_power_1", "title": "Assess critical power needs", "phase": "before",
             "timeframe": "2 hours", "costs": []},
            {"step_id": "backup_power_2", "title": "Buy and install a generator", "phase": "before",
             "timeframe": "1-2 days",
             "costs": [("generator_5kw", 1), ("electrician_service", 1), ("fuel_storage", 2)]},
            {"step_id": "backup_power_3", "title": "Run the generator during outages", "phase": "during",
             "timeframe": "ongoing", "costs": []},
        ]
    },
    {
        "strategy_id": "property_protection",
        "title": {"en": "Protect Your Premises"},
        "description": {"en": "Reduce wind and water damage to the building."},
        "applicable_risks": ["hurricane", "flooding"],
        "tier": "essential",
        "steps": [
            {"step_id": "property_protection_1", "title": "Fit hurricane shutters", "phase": "before",
             "timeframe": "1 week", "costs": [("hurricane_shutters", 4)]},
            {"step_id": "property_protection_2", "title": "Stage sandbags at entrances", "phase": "before",
             "timeframe": "3 hours", "costs": [("sandbags", 3)]},
        ]
    },
    {
        "strategy_id": "data_backup",
        "title": {"en": "Back Up Business Records"},
        "description": {"en": "Keep copies of records off-site."},
        "applicable_risks": ["cyberAttack", "fire", "hurricane"],
        "tier": "recommended",
        "steps": [
            {"step_id": "data_backup_1", "title": "Subscribe to cloud backup", "phase": "before",
             "timeframe": "1 hour", "costs": [("cloud_backup", 1)]},
            {"step_id": "data_backup_2", "title": "Test a restore", "phase": "after",
             "timeframe": "2-4 hours", "costs": []},
        ]
    },
    {
        "strategy_id": "fire_safety",
        "title": {"en": "Fire Safety Basics"},
        "applicable_risks": ["fire"],
        "tier": "essential",
        "steps": [
            {"step_id": "fire_safety_1", "title": "Mount fire extinguishers", "phase": "before",
             "timeframe": "1 day", "costs": [("fire_extinguisher", 2)]},
        ]
    },
    {
        "strategy_id": "emergency_contacts",
        "title": {"en": "Emergency Contact List"},
        "applicable_risks": ["all_hazards"],
        "tier": "essential",
        "steps": [
            {"step_id": "emergency_contacts_1", "title": "Compile staff and supplier contacts",
             "phase": "before", "timeframe": "Start this week", "costs": [("first_aid_kit", 1)]},
        ]
    },
]


def seed_demo_catalog():
    """
    Create the demo reference catalog where records don't already exist.
    Safe to call multiple times. Returns the number of records created.
    """
    created_count = 0

    existing_hazards = {h.hazard_id for h in get_hazards()}
    for hazard_id, info in CANONICAL_HAZARDS.items():
        if hazard_id not in existing_hazards:
            upsert_hazard(hazard_id, {"en": info["name"], **DEMO_HAZARD_TRANSLATIONS.get(hazard_id, {})},
                          info["category"])
            created_count += 1

    existing_multipliers = get_country_multipliers()
    for record in DEMO_MULTIPLIERS:
        if record["country_code"] in existing_multipliers:
            logger.info(f"Country multiplier '{record['country_code']}' already exists, skipping.")
            continue
        upsert_country_multiplier(CountryMultiplier(**record))
        created_count += 1

    existing_items = get_cost_items()
    for record in DEMO_COST_ITEMS:
        if record["item_id"] in existing_items:
            continue
        upsert_cost_item(CostItem(**{**record, "name": LocalizedText.parse(record["name"])}))
        created_count += 1

    existing_strategies = {s.strategy_id for s in get_strategies(active_only=False)}
    for record in DEMO_STRATEGIES:
        if record["strategy_id"] in existing_strategies:
            logger.info(f"Demo strategy '{record['strategy_id']}' already exists, skipping.")
            continue
        try:
            save_strategy(strategy_from_record(record))
        except ValidationError as e:
            logger.warning(f"Could not add demo strategy {record['strategy_id']}: {e}")
            continue
        created_count += 1

    if created_count > 0:
        logger.info(f"Demo data seeding complete: created {created_count} new record(s)")
    else:
        logger.info("Demo data seeding: all records already exist, nothing to create")

    return created_count
