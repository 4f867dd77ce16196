"""
BCP Builder - Database Module
=============================
Handles all reference-data and plan persistence using SQLite.

Every operation runs inside ``connect()``, which commits on success, rolls
back on error and always closes the connection. Multi-row writes (a strategy
with its action steps, bulk catalog replacement) happen in one transaction.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from utils.constants import DATABASE_NAME, DATABASE_PATH, CANONICAL_HAZARDS
from utils.helpers import parse_json_field
from modules.models import (
    LocalizedText, Hazard, CostItem, StepCostItem, ActionStep, Strategy, CountryMultiplier
)
from modules.risk_ids import normalize, normalize_all
from modules.validation import (
    ValidationError, validate_cost_item, validate_country_multiplier, validate_strategy
)

logger = logging.getLogger(__name__)

# Get the data directory path
DATA_DIR = Path(__file__).parent.parent / "data"
DB_PATH = Path(DATABASE_PATH) if DATABASE_PATH else DATA_DIR / DATABASE_NAME


def get_connection():
    """Get a database connection."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row  # Enable column access by name
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def connect():
    """Scoped connection: commit on success, rollback on error, always close."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_database():
    """Initialize the database with required tables."""
    with connect() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS hazards (
                hazard_id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                category TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS cost_items (
                item_id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                category TEXT NOT NULL,
                base_usd REAL NOT NULL DEFAULT 0,
                base_usd_min REAL,
                base_usd_max REAL,
                unit TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS strategies (
                strategy_id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                applicable_risks TEXT,
                tier TEXT DEFAULT 'recommended',
                is_active INTEGER DEFAULT 1,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS action_steps (
                step_id TEXT PRIMARY KEY,
                strategy_id TEXT NOT NULL,
                title TEXT,
                phase TEXT DEFAULT 'before',
                timeframe TEXT,
                sort_order INTEGER DEFAULT 0,
                FOREIGN KEY (strategy_id) REFERENCES strategies(strategy_id) ON DELETE CASCADE
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS action_step_cost_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                step_id TEXT NOT NULL,
                item_id TEXT NOT NULL,
                quantity REAL DEFAULT 1,
                FOREIGN KEY (step_id) REFERENCES action_steps(step_id) ON DELETE CASCADE,
                FOREIGN KEY (item_id) REFERENCES cost_items(item_id) ON DELETE CASCADE
            )
        ''')

        # Exactly one multiplier record per country
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS country_multipliers (
                country_code TEXT PRIMARY KEY,
                construction REAL DEFAULT 1.0,
                equipment REAL DEFAULT 1.0,
                service REAL DEFAULT 1.0,
                supplies REAL DEFAULT 1.0,
                currency_code TEXT DEFAULT 'USD',
                currency_symbol TEXT DEFAULT '$',
                exchange_rate_usd REAL DEFAULT 1.0
            )
        ''')

        # Submitted plan snapshots
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS plans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                business_name TEXT NOT NULL,
                country_code TEXT,
                risk_selection TEXT,
                strategy_ids TEXT,
                total_usd REAL DEFAULT 0,
                total_local REAL DEFAULT 0,
                currency_code TEXT DEFAULT 'USD',
                calculated_hours REAL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

    return True


# =============================================================================
# HAZARD OPERATIONS
# =============================================================================

def upsert_hazard(hazard_id, name, category=""):
    """Create or update a hazard; the id is stored in canonical form."""
    canonical = normalize(hazard_id)
    if not canonical:
        raise ValidationError(["Hazard id is required"])
    name = LocalizedText.parse(name)
    if not name:
        raise ValidationError(["Hazard name is required"])

    with connect() as conn:
        conn.execute('''
            INSERT OR REPLACE INTO hazards (hazard_id, name, category)
            VALUES (?, ?, ?)
        ''', (canonical, name.to_json(), category))

    return canonical


def get_hazards():
    """Get all hazards."""
    with connect() as conn:
        rows = conn.execute('SELECT * FROM hazards ORDER BY hazard_id').fetchall()

    return [
        Hazard(hazard_id=row['hazard_id'], name=LocalizedText.parse(row['name']),
               category=row['category'] or "")
        for row in rows
    ]


def get_known_hazard_ids():
    """Stored hazard ids plus the built-in canonical set."""
    return {h.hazard_id for h in get_hazards()} | set(CANONICAL_HAZARDS)


# =============================================================================
# COST ITEM OPERATIONS
# =============================================================================

def _row_to_cost_item(row):
    return CostItem(
        item_id=row['item_id'],
        name=LocalizedText.parse(row['name']),
        category=row['category'],
        base_usd=row['base_usd'] or 0,
        base_usd_min=row['base_usd_min'],
        base_usd_max=row['base_usd_max'],
        unit=row['unit'] or ""
    )


def upsert_cost_item(item):
    """Create or update a cost item."""
    errors = validate_cost_item(item)
    if errors:
        raise ValidationError(errors)

    with connect() as conn:
        conn.execute('''
            INSERT INTO cost_items (item_id, name, category, base_usd, base_usd_min, base_usd_max, unit)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(item_id) DO UPDATE SET
                name = excluded.name,
                category = excluded.category,
                base_usd = excluded.base_usd,
                base_usd_min = excluded.base_usd_min,
                base_usd_max = excluded.base_usd_max,
                unit = excluded.unit
        ''', (item.item_id, item.name.to_json(), item.category, item.base_usd,
              item.base_usd_min, item.base_usd_max, item.unit))

    return item.item_id


def get_cost_items():
    """Get all cost items keyed by item id."""
    with connect() as conn:
        rows = conn.execute('SELECT * FROM cost_items ORDER BY category, item_id').fetchall()

    return {row['item_id']: _row_to_cost_item(row) for row in rows}


def delete_cost_item(item_id):
    """Delete a cost item and every action step link to it."""
    with connect() as conn:
        conn.execute('DELETE FROM cost_items WHERE item_id = ?', (item_id,))

    return True


# =============================================================================
# COUNTRY MULTIPLIER OPERATIONS
# =============================================================================

def _row_to_multiplier(row):
    return CountryMultiplier(
        country_code=row['country_code'],
        construction=row['construction'],
        equipment=row['equipment'],
        service=row['service'],
        supplies=row['supplies'],
        currency_code=row['currency_code'],
        currency_symbol=row['currency_symbol'],
        exchange_rate_usd=row['exchange_rate_usd']
    )


def upsert_country_multiplier(multiplier):
    """Create or replace the single multiplier record for a country."""
    multiplier = replace(multiplier, country_code=(multiplier.country_code or "").upper())
    errors = validate_country_multiplier(multiplier)
    if errors:
        raise ValidationError(errors)

    with connect() as conn:
        conn.execute('''
            INSERT OR REPLACE INTO country_multipliers
            (country_code, construction, equipment, service, supplies,
             currency_code, currency_symbol, exchange_rate_usd)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (multiplier.country_code, multiplier.construction, multiplier.equipment,
              multiplier.service, multiplier.supplies, multiplier.currency_code,
              multiplier.currency_symbol, multiplier.exchange_rate_usd))

    return multiplier.country_code


def get_country_multipliers():
    """Get all country multipliers keyed by country code."""
    with connect() as conn:
        rows = conn.execute('SELECT * FROM country_multipliers ORDER BY country_code').fetchall()

    return {row['country_code']: _row_to_multiplier(row) for row in rows}


def get_country_multiplier(country_code):
    """Get a specific country multiplier, or None."""
    with connect() as conn:
        row = conn.execute('SELECT * FROM country_multipliers WHERE country_code = ?',
                           ((country_code or "").upper(),)).fetchone()

    return _row_to_multiplier(row) if row else None


# =============================================================================
# STRATEGY OPERATIONS
# =============================================================================

def _write_strategy(conn, strategy):
    """Replace one strategy row with its steps and cost links."""
    conn.execute('DELETE FROM strategies WHERE strategy_id = ?', (strategy.strategy_id,))
    conn.execute('''
        INSERT INTO strategies (strategy_id, title, description, applicable_risks, tier, is_active, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    ''', (strategy.strategy_id, strategy.title.to_json(), strategy.description.to_json(),
          json.dumps(strategy.applicable_risks), strategy.tier, int(strategy.is_active),
          datetime.now().isoformat()))

    for order, step in enumerate(strategy.action_steps):
        conn.execute('''
            INSERT INTO action_steps (step_id, strategy_id, title, phase, timeframe, sort_order)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (step.step_id, strategy.strategy_id, step.title.to_json(), step.phase,
              step.timeframe, step.sort_order or order))

        for link in step.cost_items:
            conn.execute('''
                INSERT INTO action_step_cost_items (step_id, item_id, quantity)
                VALUES (?, ?, ?)
            ''', (step.step_id, link.item_id, link.quantity))


def _prepare_strategy(strategy, known_hazard_ids, known_item_ids):
    """Store applicable risks in canonical form and validate."""
    prepared = replace(strategy, applicable_risks=normalize_all(strategy.applicable_risks))
    errors = validate_strategy(prepared, known_hazard_ids, known_item_ids)
    if errors:
        raise ValidationError(errors)
    return prepared


def save_strategy(strategy):
    """Create or replace a strategy and all of its action steps atomically."""
    prepared = _prepare_strategy(strategy, get_known_hazard_ids(), set(get_cost_items()))

    with connect() as conn:
        step_ids = [step.step_id for step in prepared.action_steps]
        if step_ids:
            taken = conn.execute(f'''
                SELECT step_id, strategy_id FROM action_steps
                WHERE step_id IN ({", ".join("?" * len(step_ids))}) AND strategy_id != ?
            ''', (*step_ids, prepared.strategy_id)).fetchall()
            if taken:
                raise ValidationError([
                    f"Action step id '{row['step_id']}' is already used by strategy '{row['strategy_id']}'"
                    for row in taken
                ])
        _write_strategy(conn, prepared)

    logger.info(f"Saved strategy '{prepared.strategy_id}' with {len(prepared.action_steps)} action steps")
    return prepared.strategy_id


def replace_strategies(strategies):
    """
    Bulk cleanup: delete every strategy and recreate from ``strategies``.

    Runs in a single transaction; a failure leaves the old catalog intact.
    """
    hazard_ids = get_known_hazard_ids()
    item_ids = set(get_cost_items())
    prepared = [_prepare_strategy(s, hazard_ids, item_ids) for s in strategies]

    with connect() as conn:
        conn.execute('DELETE FROM strategies')
        for strategy in prepared:
            _write_strategy(conn, strategy)

    logger.info(f"Replaced strategy catalog with {len(prepared)} strategies")
    return len(prepared)


def _load_strategies(conn, where="", params=()):
    cost_items = {row['item_id']: _row_to_cost_item(row)
                  for row in conn.execute('SELECT * FROM cost_items').fetchall()}

    links = {}
    for row in conn.execute('SELECT * FROM action_step_cost_items ORDER BY id').fetchall():
        links.setdefault(row['step_id'], []).append(
            StepCostItem(item_id=row['item_id'], quantity=row['quantity'],
                         item=cost_items.get(row['item_id']))
        )

    steps = {}
    for row in conn.execute('SELECT * FROM action_steps ORDER BY sort_order, step_id').fetchall():
        steps.setdefault(row['strategy_id'], []).append(ActionStep(
            step_id=row['step_id'],
            strategy_id=row['strategy_id'],
            title=LocalizedText.parse(row['title']),
            phase=row['phase'] or "before",
            timeframe=row['timeframe'] or "",
            sort_order=row['sort_order'] or 0,
            cost_items=links.get(row['step_id'], [])
        ))

    strategies = []
    for row in conn.execute(f'SELECT * FROM strategies {where} ORDER BY strategy_id', params).fetchall():
        context = f"strategy {row['strategy_id']} applicable_risks"
        strategies.append(Strategy(
            strategy_id=row['strategy_id'],
            title=LocalizedText.parse(row['title']),
            description=LocalizedText.parse(row['description']),
            applicable_risks=parse_json_field(row['applicable_risks'], [], context),
            tier=row['tier'] or "recommended",
            action_steps=steps.get(row['strategy_id'], []),
            is_active=bool(row['is_active'])
        ))
    return strategies


def get_strategies(active_only=True):
    """Get strategies with nested action steps and resolved cost items."""
    with connect() as conn:
        if active_only:
            return _load_strategies(conn, 'WHERE is_active = 1')
        return _load_strategies(conn)


def get_strategy(strategy_id):
    """Get a specific strategy, or None."""
    with connect() as conn:
        found = _load_strategies(conn, 'WHERE strategy_id = ?', (strategy_id,))
    return found[0] if found else None


def delete_strategy(strategy_id):
    """Delete a strategy with its action steps and cost links."""
    with connect() as conn:
        conn.execute('DELETE FROM strategies WHERE strategy_id = ?', (strategy_id,))

    return True


# =============================================================================
# PLAN OPERATIONS
# =============================================================================

def save_plan(business_name, country_code, risk_selection, strategy_ids, totals):
    """Persist a submitted plan snapshot."""
    with connect() as conn:
        cursor = conn.execute('''
            INSERT INTO plans (business_name, country_code, risk_selection, strategy_ids,
                               total_usd, total_local, currency_code, calculated_hours)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (business_name, (country_code or "").upper(), json.dumps(risk_selection.scores),
              json.dumps(list(strategy_ids)), totals.get('total_usd', 0), totals.get('total_local', 0),
              totals.get('currency_code', 'USD'), totals.get('calculated_hours', 0)))
        plan_id = cursor.lastrowid

    return plan_id


def _row_to_plan(row):
    plan = dict(row)
    plan['risk_selection'] = parse_json_field(row['risk_selection'], {}, f"plan {row['id']} risk_selection")
    plan['strategy_ids'] = parse_json_field(row['strategy_ids'], [], f"plan {row['id']} strategy_ids")
    return plan


def get_plan(plan_id):
    """Get a specific plan by ID."""
    with connect() as conn:
        row = conn.execute('SELECT * FROM plans WHERE id = ?', (plan_id,)).fetchone()

    return _row_to_plan(row) if row else None


def get_plans():
    """Get all plans, newest first."""
    with connect() as conn:
        rows = conn.execute('SELECT * FROM plans ORDER BY created_at DESC, id DESC').fetchall()

    return [_row_to_plan(row) for row in rows]
