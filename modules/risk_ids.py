"""
BCP Builder - Risk Identifier Normalizer
========================================
Turns any hazard id spelling (``PowerOutage``, ``power_outage``,
``Power Outage``, ``flooding``) into one canonical snake_case token.
"""

import re
import unicodedata

from utils.constants import CANONICAL_HAZARDS, RISK_ID_SYNONYMS, DEFAULT_LOCALE

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-]+")
_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def to_snake_case(raw):
    """Mechanical snake_case conversion, no synonym lookup."""
    if not raw or not isinstance(raw, str):
        return ""

    text = unicodedata.normalize("NFKD", raw)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = text.lower()
    text = _SEPARATORS.sub("_", text)
    text = _INVALID_CHARS.sub("", text)
    text = _REPEATED_UNDERSCORES.sub("_", text)
    return text.strip("_")


def normalize(raw):
    """Canonical risk id for ``raw``; ``""`` for empty input."""
    token = to_snake_case(raw)
    return RISK_ID_SYNONYMS.get(token, token)


def normalize_all(raw_ids):
    """Normalize a list of ids, dropping empties and duplicates (order kept)."""
    seen = []
    for raw in raw_ids or []:
        token = normalize(raw)
        if token and token not in seen:
            seen.append(token)
    return seen


def is_canonical(risk_id):
    return risk_id in CANONICAL_HAZARDS


def display_name(risk_id, locale=DEFAULT_LOCALE, hazard_names=None):
    """
    Display name for a hazard id.

    ``hazard_names`` maps hazard id -> LocalizedText (the stored hazard
    names); the built-in English name and then a title-cased token are used
    when it has nothing for the id.
    """
    token = normalize(risk_id)
    name = (hazard_names or {}).get(token)
    if name:
        return name.get(locale)
    hazard = CANONICAL_HAZARDS.get(token)
    if hazard:
        return hazard["name"]
    return token.replace("_", " ").title()
