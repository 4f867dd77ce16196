"""
BCP Builder - Plan Export Data
==============================
Builds the tables consumed by document export: strategies grouped under
the risks that triggered them, action steps with costs and timeframes, and
a downloadable action workbook.
"""

import io

import pandas as pd

from utils.constants import NO_STRATEGY_MESSAGE, DEFAULT_LOCALE, WORKBOOK_SHEETS
from modules.risk_ids import display_name
from modules.costs import format_cost
from modules.timeframes import format_hours, parse_timeframe_to_hours

STRATEGY_COLUMNS = ["Risk", "Risk ID", "Strategy ID", "Strategy", "Tier",
                    "Cost (USD)", "Cost (Local)", "Currency", "Estimated Time"]
STEP_COLUMNS = ["Strategy ID", "Strategy", "Step", "Phase", "Timeframe",
                "Hours", "Cost (USD)", "Cost (Local)"]
ALL_HAZARDS_LABEL = "All Hazards"


def plan_strategy_table(match_result, costs, locale=DEFAULT_LOCALE, hazard_names=None):
    """
    One row per (risk, strategy) pair.

    A risk without strategies still gets a row so coverage gaps are
    visible in the exported plan.
    """
    rows = []
    for risk_id, strategies in match_result.by_risk.items():
        if not strategies:
            rows.append({
                "Risk": display_name(risk_id, locale, hazard_names), "Risk ID": risk_id,
                "Strategy ID": "", "Strategy": NO_STRATEGY_MESSAGE, "Tier": "",
                "Cost (USD)": 0.0, "Cost (Local)": 0.0, "Currency": "", "Estimated Time": ""
            })
            continue

        for strategy in strategies:
            cost = costs[strategy.strategy_id]
            rows.append({
                "Risk": display_name(risk_id, locale, hazard_names),
                "Risk ID": risk_id,
                "Strategy ID": strategy.strategy_id,
                "Strategy": strategy.title.get(locale),
                "Tier": strategy.tier,
                "Cost (USD)": cost.total_usd,
                "Cost (Local)": cost.total_local,
                "Currency": cost.currency_code,
                "Estimated Time": format_hours(cost.calculated_hours)
            })

    for strategy in match_result.universal:
        if strategy.strategy_id not in costs:
            continue
        cost = costs[strategy.strategy_id]
        rows.append({
            "Risk": ALL_HAZARDS_LABEL,
            "Risk ID": "",
            "Strategy ID": strategy.strategy_id,
            "Strategy": strategy.title.get(locale),
            "Tier": strategy.tier,
            "Cost (USD)": cost.total_usd,
            "Cost (Local)": cost.total_local,
            "Currency": cost.currency_code,
            "Estimated Time": format_hours(cost.calculated_hours)
        })

    return pd.DataFrame(rows, columns=STRATEGY_COLUMNS)


def action_step_table(strategies, costs, locale=DEFAULT_LOCALE):
    """Action steps for each strategy, in step order."""
    rows = []
    for strategy in strategies:
        if strategy.strategy_id not in costs:
            continue
        step_costs = {s["step_id"]: s for s in costs[strategy.strategy_id].step_breakdown}
        for step in strategy.action_steps:
            step_cost = step_costs.get(step.step_id, {})
            rows.append({
                "Strategy ID": strategy.strategy_id,
                "Strategy": strategy.title.get(locale),
                "Step": step.title.get(locale),
                "Phase": step.phase,
                "Timeframe": step.timeframe,
                "Hours": parse_timeframe_to_hours(step.timeframe),
                "Cost (USD)": step_cost.get("total_usd", 0.0),
                "Cost (Local)": step_cost.get("local_amount", 0.0)
            })

    return pd.DataFrame(rows, columns=STEP_COLUMNS)


def plan_summary_table(business_name, country_code, plan_cost, match_result, locale=DEFAULT_LOCALE,
                       hazard_names=None):
    """Key/value summary sheet."""
    rows = [
        ("Business", business_name),
        ("Country", country_code),
        ("Selected Risks", ", ".join(display_name(r, locale, hazard_names) for r in match_result.by_risk)),
        ("Strategies", len(plan_cost["strategies"])),
        ("Total Cost (USD)", format_cost(plan_cost["total_usd"], "USD")),
        ("Total Cost (Local)", format_cost(plan_cost["total_local"], plan_cost["currency_code"],
                                           plan_cost["currency_symbol"])),
        ("Estimated Effort", format_hours(plan_cost["calculated_hours"])),
        ("Coverage Gaps",
         ", ".join(display_name(r, locale, hazard_names) for r in match_result.coverage_gaps) or "None")
    ]
    return pd.DataFrame(rows, columns=["Item", "Value"])


def build_action_workbook(business_name, country_code, match_result, plan_cost, locale=DEFAULT_LOCALE,
                          hazard_names=None):
    """
    Excel action workbook as bytes.

    ``hazard_names`` maps hazard id -> LocalizedText for the risk labels.
    """
    costs = plan_cost["strategies"]
    sheets = dict(zip(WORKBOOK_SHEETS, [
        plan_summary_table(business_name, country_code, plan_cost, match_result, locale, hazard_names),
        plan_strategy_table(match_result, costs, locale, hazard_names),
        action_step_table(match_result.strategies() + match_result.universal, costs, locale)
    ]))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return output.getvalue()
