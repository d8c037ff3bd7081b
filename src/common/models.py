"""Shared Pydantic data models for Darkwater Ledger exports.

These models define the data contract of the company financial report
written by the financials exporter and read by anything downstream
(dashboards, spreadsheets, audits).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# === Per-vehicle ===

class VehicleSnapshotExport(BaseModel):
    """One vehicle's identity, stage progress and financial snapshot."""
    vehicle_id: str
    name: str = ""
    brand: str = ""
    model: str = ""
    year: int | None = None
    stage: str
    progress_pct: float = Field(ge=0, le=100, description="Pipeline completion (%)")
    is_active: bool

    acquisition_price: float = Field(ge=0)
    parts_cost: float = Field(ge=0)
    services_cost: float = Field(ge=0)
    transportation_cost: float = Field(ge=0)
    projected_costs: float = Field(ge=0, description="High projected cost, active only")
    sunk_cost: float = Field(ge=0)
    total_investment: float = Field(ge=0)

    projected_value: float | None = None
    projected_high_profit: float | None = None
    projected_low_profit: float | None = None
    projected_high_margin: float | None = None
    projected_low_margin: float | None = None

    actual_sale_price: float | None = None
    actual_profit: float | None = Field(default=None, description="May be negative (loss)")
    margin_pct: float | None = None


# === Company rollups ===

class PortfolioExport(BaseModel):
    """Totals across the active inventory."""
    total_inventory_value: float
    cash_on_hand: float
    equipment_value: float
    total_assets: float
    total_bike_count: int = Field(ge=0)
    total_projected_value: float
    aggregate_projected_profit: float


class MonthlyPerformanceExport(BaseModel):
    """Sales rollup for one calendar month."""
    key: str = Field(pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    year: int
    month: int = Field(ge=1, le=12)
    month_name: str
    bikes_sold: int = Field(ge=1)
    total_revenue: float
    total_profit: float
    average_sale_price: float
    profit_margin: float


class PerformanceExport(BaseModel):
    """Sold-inventory performance."""
    total_sold: int = Field(ge=0)
    total_revenue: float
    total_profit: float
    average_profit_margin: float
    monthly_breakdown: list[MonthlyPerformanceExport] = []
    top_performing_months: list[MonthlyPerformanceExport] = []


# === API Contract: company report ===

class CompanyFinancialReport(BaseModel):
    """Full financial report for one company; the main data contract."""
    company_id: str
    generated_at: datetime
    stage_counts: dict[str, int]
    vehicles: list[VehicleSnapshotExport]
    portfolio: PortfolioExport
    performance: PerformanceExport
