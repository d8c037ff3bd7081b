"""SQLite database utilities for Darkwater Ledger.

Provides connection management and table initialization.
Vehicles are partitioned by company_id; the three cost ledgers
reference their vehicle with ON DELETE CASCADE.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .config import settings

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS vehicles (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    brand TEXT NOT NULL DEFAULT '',
    model TEXT NOT NULL DEFAULT '',
    year INTEGER,
    vin TEXT NOT NULL DEFAULT '',
    mileage TEXT NOT NULL DEFAULT '',
    color TEXT NOT NULL DEFAULT '',
    engine_displacement TEXT NOT NULL DEFAULT '',
    horsepower TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    acquisition_price REAL NOT NULL DEFAULT 0,
    projected_high_sale REAL NOT NULL DEFAULT 0,
    projected_low_sale REAL NOT NULL DEFAULT 0,
    projected_high_cost REAL NOT NULL DEFAULT 0,
    projected_low_cost REAL NOT NULL DEFAULT 0,
    actual_list_price REAL,
    actual_sale_price REAL,
    date_acquired TEXT,
    date_sold TEXT,
    stage TEXT NOT NULL DEFAULT 'Acquisition',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_vehicles_company_stage
    ON vehicles(company_id, stage);

CREATE TABLE IF NOT EXISTS parts (
    id TEXT PRIMARY KEY,
    vehicle_id TEXT NOT NULL,
    cost REAL NOT NULL DEFAULT 0,
    date TEXT,
    payment_type TEXT NOT NULL DEFAULT '',
    notes TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL DEFAULT '',
    condition TEXT NOT NULL DEFAULT '',
    supplier TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (vehicle_id) REFERENCES vehicles(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS services (
    id TEXT PRIMARY KEY,
    vehicle_id TEXT NOT NULL,
    cost REAL NOT NULL DEFAULT 0,
    date TEXT,
    payment_type TEXT NOT NULL DEFAULT '',
    notes TEXT NOT NULL DEFAULT '',
    title TEXT NOT NULL DEFAULT '',
    service_type TEXT NOT NULL DEFAULT '',
    service_location TEXT NOT NULL DEFAULT 'In-House',
    hours REAL,
    technician TEXT,
    service_provider TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (vehicle_id) REFERENCES vehicles(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS transportation (
    id TEXT PRIMARY KEY,
    vehicle_id TEXT NOT NULL,
    cost REAL NOT NULL DEFAULT 0,
    date TEXT,
    payment_type TEXT NOT NULL DEFAULT '',
    notes TEXT NOT NULL DEFAULT '',
    type TEXT NOT NULL DEFAULT '',
    location TEXT NOT NULL DEFAULT '',
    company TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (vehicle_id) REFERENCES vehicles(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_parts_vehicle ON parts(vehicle_id);
CREATE INDEX IF NOT EXISTS idx_services_vehicle ON services(vehicle_id);
CREATE INDEX IF NOT EXISTS idx_transportation_vehicle ON transportation(vehicle_id);
"""


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Get a SQLite connection with row factory enabled."""
    path = Path(db_path) if db_path else settings.database_abs_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """Create all tables if they don't exist."""
    conn = get_connection(db_path)
    try:
        conn.executescript(_CREATE_TABLES_SQL)
        conn.commit()
        logger.info("Database schema initialized at %s", db_path or settings.database_abs_path)
    finally:
        conn.close()
