"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"
DATA_EXPORTS_DIR = DATA_DIR / "exports"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class DatabaseSettings(BaseModel):
    """Database connection settings."""
    db_path: str = str(DATA_DIR / "darkwater_ledger.db")


class FinancialSettings(BaseModel):
    """Defaults for the portfolio and performance rollups."""
    cash_on_hand: float = 0.0
    equipment_value: float = 0.0
    top_months: int = Field(default=3, ge=0)


class Settings(BaseModel):
    """Top-level application settings."""
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    financial: FinancialSettings = Field(default_factory=FinancialSettings)
    default_company: str = "darkwater"

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables win over the YAML file:
        DATABASE_PATH, CASH_ON_HAND, EQUIPMENT_VALUE, DEFAULT_COMPANY.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        if db_path := os.getenv("DATABASE_PATH"):
            data.setdefault("database", {})["db_path"] = db_path
        if cash := os.getenv("CASH_ON_HAND"):
            data.setdefault("financial", {})["cash_on_hand"] = float(cash)
        if equipment := os.getenv("EQUIPMENT_VALUE"):
            data.setdefault("financial", {})["equipment_value"] = float(equipment)
        if company := os.getenv("DEFAULT_COMPANY"):
            data["default_company"] = company

        return cls(**data)

    @property
    def database_abs_path(self) -> Path:
        """Resolve database path relative to project root."""
        p = Path(self.database.db_path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


# Singleton settings instance
settings = Settings.load()
