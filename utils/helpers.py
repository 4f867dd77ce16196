"""
BCP Builder - Helper Utilities
==============================
Common functions used across the application.
"""

import json
import logging
import math
from datetime import datetime

from utils.constants import CURRENCY_SYMBOLS, RISK_LEVELS

logger = logging.getLogger(__name__)


def parse_json_field(raw, default, context=""):
    """
    Parse a JSON column from a stored record.

    Legacy records hold hand-edited JSON blobs; anything unparseable (or of
    the wrong shape) falls back to ``default`` so the catalog stays renderable.
    """
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str):
        return raw if isinstance(raw, type(default)) else default

    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Malformed JSON in {context or 'record'}: {raw[:80]!r}")
        return default

    if not isinstance(value, type(default)):
        logger.warning(f"Unexpected JSON type in {context or 'record'}: {type(value).__name__}")
        return default
    return value


def parse_cost_links(text):
    """
    Parse an editor cell like ``generator_5kw:1, fuel_storage:2`` into
    (item_id, quantity) pairs. A missing quantity means 1.

    Raises ValueError for a quantity that is not a number.
    """
    links = []
    for part in (text or "").split(","):
        part = part.strip()
        if not part:
            continue
        item_id, _, quantity = part.partition(":")
        item_id = item_id.strip()
        quantity = quantity.strip() or "1"
        try:
            value = float(quantity)
        except ValueError:
            raise ValueError(f"Invalid quantity '{quantity}' for cost item '{item_id}'") from None
        links.append((item_id, int(value) if value.is_integer() else value))
    return links


def format_cost_links(links):
    """Inverse of ``parse_cost_links`` for StepCostItem lists."""
    parts = []
    for link in links:
        quantity = link.quantity
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        parts.append(f"{link.item_id}:{quantity}")
    return ", ".join(parts)


def is_valid_number(value):
    """True for finite int/float values (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def get_currency_symbol(currency_code):
    """Get display symbol for a currency code."""
    return CURRENCY_SYMBOLS.get(currency_code, currency_code)


def format_currency(amount, currency="USD", symbol=None):
    """Format a number as currency, e.g. ``J$ 12,500``."""
    symbol = symbol or get_currency_symbol(currency)
    amount = amount or 0
    if symbol == "$":
        return f"${amount:,.0f}"
    return f"{symbol} {amount:,.0f}"


def format_compact_currency(amount, currency="USD", symbol=None):
    """Format a number as a short currency string for metric tiles."""
    symbol = symbol or get_currency_symbol(currency)

    if amount >= 1_000_000:
        return f"{symbol}{amount/1_000_000:.1f}M"
    elif amount >= 1_000:
        return f"{symbol}{amount/1_000:.1f}K"
    else:
        return f"{symbol}{amount:,.0f}"


def get_risk_level(score):
    """Get risk level key for a 0-10 score."""
    for level, info in RISK_LEVELS.items():
        if score >= info["min"]:
            return level
    return "VERY_LOW"


def get_risk_level_label(score):
    return RISK_LEVELS[get_risk_level(score)]["label"]


def export_timestamp():
    """Generate timestamp for export filenames."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")
