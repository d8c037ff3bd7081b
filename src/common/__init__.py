"""Shared components for the inventory and financials packages.

Configuration (``settings``), the SQLite schema and connections, CLI
logging setup, and the pydantic export contract of the company report.
"""

from .config import DATA_DIR, PROJECT_ROOT, Settings, settings
from .database import get_connection, init_db
from .logging import setup_logging
from .models import CompanyFinancialReport

__all__ = [
    "CompanyFinancialReport",
    "DATA_DIR",
    "PROJECT_ROOT",
    "Settings",
    "get_connection",
    "init_db",
    "settings",
    "setup_logging",
]
