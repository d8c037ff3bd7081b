"""Data models for derived financial figures.

Nothing here is persisted: snapshots and rollups are recomputed from the
vehicle and its ledgers on every read.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field


def _money(value: float | None) -> float | None:
    return round(value, 2) if value is not None else None


@dataclass
class FinancialSnapshot:
    """Investment and profit figures for one vehicle at a point in time.

    Projected figures are set only while the vehicle is active; actual
    figures only once it is sold with a sale price.
    """

    vehicle_id: str
    stage: str
    is_active: bool
    acquisition_price: float = 0.0
    parts_cost: float = 0.0
    services_cost: float = 0.0
    transportation_cost: float = 0.0
    projected_costs: float = 0.0  # folded into total_investment while active
    total_investment: float = 0.0

    # Active only
    projected_value: float | None = None
    projected_high_profit: float | None = None
    projected_low_profit: float | None = None
    projected_high_margin: float | None = None
    projected_low_margin: float | None = None

    # Sold only
    actual_sale_price: float | None = None
    actual_profit: float | None = None
    margin_pct: float | None = None

    @property
    def sunk_cost(self) -> float:
        """Acquisition price plus every realized cost entry."""
        return self.total_investment - self.projected_costs

    @property
    def is_loss(self) -> bool:
        return self.actual_profit is not None and self.actual_profit < 0

    def to_dict(self) -> dict:
        return {
            "vehicle_id": self.vehicle_id,
            "stage": self.stage,
            "is_active": self.is_active,
            "acquisition_price": _money(self.acquisition_price),
            "parts_cost": _money(self.parts_cost),
            "services_cost": _money(self.services_cost),
            "transportation_cost": _money(self.transportation_cost),
            "projected_costs": _money(self.projected_costs),
            "sunk_cost": _money(self.sunk_cost),
            "total_investment": _money(self.total_investment),
            "projected_value": _money(self.projected_value),
            "projected_high_profit": _money(self.projected_high_profit),
            "projected_low_profit": _money(self.projected_low_profit),
            "projected_high_margin": _money(self.projected_high_margin),
            "projected_low_margin": _money(self.projected_low_margin),
            "actual_sale_price": _money(self.actual_sale_price),
            "actual_profit": _money(self.actual_profit),
            "margin_pct": _money(self.margin_pct),
        }


@dataclass
class PortfolioSummary:
    """Totals across the active (unsold) inventory."""

    total_inventory_value: float = 0.0
    cash_on_hand: float = 0.0
    equipment_value: float = 0.0
    total_bike_count: int = 0
    total_projected_value: float = 0.0

    @property
    def total_assets(self) -> float:
        return self.total_inventory_value + self.cash_on_hand + self.equipment_value

    @property
    def aggregate_projected_profit(self) -> float:
        return self.total_projected_value - self.total_inventory_value

    def to_dict(self) -> dict:
        return {
            "total_inventory_value": _money(self.total_inventory_value),
            "cash_on_hand": _money(self.cash_on_hand),
            "equipment_value": _money(self.equipment_value),
            "total_assets": _money(self.total_assets),
            "total_bike_count": self.total_bike_count,
            "total_projected_value": _money(self.total_projected_value),
            "aggregate_projected_profit": _money(self.aggregate_projected_profit),
        }


@dataclass
class MonthlyPerformanceRecord:
    """Sales rollup for one calendar month."""

    year: int
    month: int  # 1-12
    bikes_sold: int = 0
    total_revenue: float = 0.0
    total_profit: float = 0.0

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]

    @property
    def average_sale_price(self) -> float:
        if self.bikes_sold == 0:
            return 0.0
        return self.total_revenue / self.bikes_sold

    @property
    def profit_margin(self) -> float:
        if not self.total_revenue:
            return 0.0
        return self.total_profit / self.total_revenue * 100

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "year": self.year,
            "month": self.month,
            "month_name": self.month_name,
            "bikes_sold": self.bikes_sold,
            "total_revenue": _money(self.total_revenue),
            "total_profit": _money(self.total_profit),
            "average_sale_price": _money(self.average_sale_price),
            "profit_margin": _money(self.profit_margin),
        }


@dataclass
class PerformanceSummary:
    """Sold-inventory performance: monthly breakdown plus overall totals."""

    total_sold: int = 0
    total_revenue: float = 0.0
    total_profit: float = 0.0
    monthly_breakdown: list[MonthlyPerformanceRecord] = field(default_factory=list)
    top_performing_months: list[MonthlyPerformanceRecord] = field(default_factory=list)

    @property
    def average_profit_margin(self) -> float:
        if not self.total_revenue:
            return 0.0
        return self.total_profit / self.total_revenue * 100

    def month(self, year: int, month: int) -> MonthlyPerformanceRecord | None:
        return next(
            (r for r in self.monthly_breakdown if r.year == year and r.month == month),
            None,
        )

    def to_dict(self) -> dict:
        return {
            "total_sold": self.total_sold,
            "total_revenue": _money(self.total_revenue),
            "total_profit": _money(self.total_profit),
            "average_profit_margin": _money(self.average_profit_margin),
            "monthly_breakdown": [r.to_dict() for r in self.monthly_breakdown],
            "top_performing_months": [r.to_dict() for r in self.top_performing_months],
        }
