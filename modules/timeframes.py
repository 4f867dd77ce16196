"""
BCP Builder - Time Aggregator
=============================
Parses free-text action step timeframes ("2 hours", "1-2 days", "1 week")
into hours and totals them into a rough implementation-effort estimate.
"""

import logging
import re

from utils.constants import HOURS_PER_UNIT, NOMINAL_TIMEFRAME_HOURS, NOMINAL_TIMEFRAME_PHRASES

logger = logging.getLogger(__name__)

_NUMBER_RANGE = re.compile(r"(\d+(?:\.\d+)?)(?:\s*(?:-|–|to)\s*(\d+(?:\.\d+)?))?")
_UNIT = re.compile(r"\b(minute|min|hour|hr|day|week|month|year)s?\b")
_UNIT_ALIASES = {"min": "minute", "hr": "hour"}


def parse_timeframe_to_hours(text):
    """
    Convert a timeframe string to hours.

    Ranges use the average of both bounds. Free text without a recognizable
    amount and unit ("ongoing", "asap") counts as one nominal hour. Empty
    input is 0.
    """
    if not text or not isinstance(text, str):
        return 0

    lower = text.lower().strip()
    if not lower:
        return 0

    if any(phrase in lower for phrase in NOMINAL_TIMEFRAME_PHRASES):
        return NOMINAL_TIMEFRAME_HOURS

    unit_match = _UNIT.search(lower)
    if not unit_match:
        return NOMINAL_TIMEFRAME_HOURS
    unit = _UNIT_ALIASES.get(unit_match.group(1), unit_match.group(1))

    number_match = _NUMBER_RANGE.search(lower)
    if number_match:
        low = float(number_match.group(1))
        high = float(number_match.group(2)) if number_match.group(2) else low
        amount = (low + high) / 2
    else:
        # "a week", "within the month"
        amount = 1

    return amount * HOURS_PER_UNIT[unit]


def sum_strategy_hours(action_steps):
    """Total hours across action steps, rounded to one decimal."""
    if not action_steps:
        return 0

    total = sum(parse_timeframe_to_hours(step.timeframe) for step in action_steps)
    return round(total, 1)


def format_hours(hours):
    """Human-readable effort, e.g. ``~3h`` or ``~2 weeks``."""
    if not hours:
        return "Not estimated"
    if hours < 1:
        return "Less than 1 hour"
    if hours == 1:
        return "1 hour"
    if hours < 8:
        return f"~{round(hours)}h"
    if hours < 40:
        days = round(hours / 8)
        return f"~{days} {'day' if days == 1 else 'days'}"
    if hours < 160:
        weeks = round(hours / 40)
        return f"~{weeks} {'week' if weeks == 1 else 'weeks'}"
    months = round(hours / 160)
    return f"~{months} {'month' if months == 1 else 'months'}"


def check_step_timeframes(strategy):
    """Log steps lacking a timeframe; returns how many are missing one."""
    steps = strategy.action_steps
    if not steps:
        logger.warning(f"Strategy '{strategy.strategy_id}' has no action steps")
        return 0

    missing = [step for step in steps if not (step.timeframe or "").strip()]
    if missing:
        logger.warning(
            f"Strategy '{strategy.strategy_id}': {len(steps) - len(missing)}/{len(steps)} "
            f"action steps have timeframes"
        )
    return len(missing)
