"""Tests for the active-inventory portfolio summary."""

from __future__ import annotations

from src.financials.models import PortfolioSummary
from src.financials.portfolio import PortfolioSummarizer
from src.inventory.models import PartEntry, VehicleAccount, VehicleRecord


def _account(vehicle_id: str, acquisition: float, stage: str = "Listed", **extra) -> VehicleAccount:
    return VehicleAccount(
        vehicle=VehicleRecord(id=vehicle_id, acquisition_price=acquisition, stage=stage, **extra),
    )


class TestPortfolioSummarizer:
    """Test totals over active vehicles."""

    def test_total_assets(self):
        accounts = [_account("a", 7000), _account("b", 5000)]
        summary = PortfolioSummarizer.compute(accounts, cash=50000, equipment=25000)
        assert summary.total_inventory_value == 12000
        assert summary.total_assets == 87000
        assert summary.total_bike_count == 2
        assert summary.cash_on_hand == 50000
        assert summary.equipment_value == 25000

    def test_sold_vehicles_ignored(self):
        accounts = [
            _account("a", 7000),
            _account("b", 5000, stage="Sold", actual_sale_price=6000, date_sold="not-a-date"),
        ]
        summary = PortfolioSummarizer.compute(accounts, 0, 0)
        assert summary.total_bike_count == 1
        assert summary.total_inventory_value == 7000

    def test_includes_costs_and_projections(self):
        account = VehicleAccount(
            vehicle=VehicleRecord(
                id="a",
                acquisition_price=4000,
                projected_high_cost=500,
                projected_high_sale=7000,
                stage="Media",
            ),
            parts=[PartEntry(vehicle_id="a", cost=250)],
        )
        summary = PortfolioSummarizer.compute([account])
        assert summary.total_inventory_value == 4750
        assert summary.total_projected_value == 7000
        assert summary.aggregate_projected_profit == 2250

    def test_empty(self):
        summary = PortfolioSummarizer.compute([], cash=100, equipment=0)
        assert summary.total_bike_count == 0
        assert summary.total_inventory_value == 0
        assert summary.total_assets == 100

    def test_order_independent(self):
        accounts = [_account(str(i), 1000 + i * 0.1) for i in range(20)]
        forward = PortfolioSummarizer.compute(accounts)
        backward = PortfolioSummarizer.compute(list(reversed(accounts)))
        assert forward.total_inventory_value == backward.total_inventory_value


class TestPortfolioSummaryModel:
    def test_to_dict(self):
        d = PortfolioSummary(
            total_inventory_value=12000,
            cash_on_hand=50000,
            equipment_value=25000,
            total_bike_count=2,
            total_projected_value=15000,
        ).to_dict()
        assert d["total_assets"] == 87000
        assert d["aggregate_projected_profit"] == 3000
        assert d["total_bike_count"] == 2
