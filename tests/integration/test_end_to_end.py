"""End-to-end tests: intake through sale, read back through the store."""

from __future__ import annotations

import pytest

from src.financials.aggregator import FinancialAggregator
from src.financials.monthly import MonthlyPerformanceAggregator
from src.financials.portfolio import PortfolioSummarizer
from src.inventory.ledger import CostLedger
from src.inventory.lifecycle import Stage
from src.inventory.models import CostKind, VehicleRecord
from src.inventory.store import NotFoundError


@pytest.fixture
def bike(store):
    return store.create_vehicle(VehicleRecord(
        company_id="darkwater",
        name="2018 Suzuki GSX-R750",
        acquisition_price=5000,
        projected_high_cost=300,
        stage="Evaluation",
    ))


def _snapshot(store, vehicle_id):
    return FinancialAggregator.compute_account(store.load_account(vehicle_id))


class TestVehicleLifecycle:
    """Walk one bike from intake to sale."""

    def test_active_then_sold(self, store, bike):
        CostLedger(store, bike.id, CostKind.PART).add({"name": "Clutch cable", "cost": 200})
        CostLedger(store, bike.id, CostKind.SERVICE).add({"title": "Carb sync", "cost": 150})

        assert _snapshot(store, bike.id).total_investment == 5650

        store.set_stage(bike.id, "Listed")
        store.mark_sold(bike.id, 6500, "2024-03-15")
        sold = _snapshot(store, bike.id)

        assert sold.stage == Stage.SOLD.value
        assert sold.total_investment == 5350
        assert sold.actual_profit == 1150
        assert sold.margin_pct == pytest.approx(17.7, abs=0.05)

    def test_delete_missing_entry_leaves_totals(self, store, bike):
        parts = CostLedger(store, bike.id, CostKind.PART)
        parts.add({"cost": 200})
        before = _snapshot(store, bike.id).total_investment

        with pytest.raises(NotFoundError):
            parts.remove("does-not-exist")

        assert _snapshot(store, bike.id).total_investment == before

    def test_edit_and_remove_entries(self, store, bike):
        hauls = CostLedger(store, bike.id, CostKind.TRANSPORTATION)
        entry = hauls.add({"type": "Pickup", "location": "Olympia", "cost": 120})
        hauls.update(entry.id, {"cost": 90})
        assert _snapshot(store, bike.id).transportation_cost == 90

        hauls.remove(entry.id)
        assert _snapshot(store, bike.id).total_investment == 5300


class TestCompanyRollups:
    """Portfolio and monthly rollups over stored inventory."""

    def test_unparsable_sale_date(self, store):
        listed = store.create_vehicle(VehicleRecord(company_id="darkwater", acquisition_price=12000, stage="Listed"))
        odd = store.create_vehicle(VehicleRecord(company_id="darkwater", acquisition_price=500, stage="Listed"))
        store.mark_sold(odd.id, 1000, "not-a-date")

        accounts = store.load_accounts("darkwater")
        portfolio = PortfolioSummarizer.compute(accounts, cash=50000, equipment=25000)
        performance = MonthlyPerformanceAggregator.compute(accounts)

        assert portfolio.total_bike_count == 1
        assert portfolio.total_inventory_value == 12000
        assert portfolio.total_assets == 87000
        assert performance.monthly_breakdown == []
        assert performance.total_sold == 1
        assert store.get_vehicle(listed.id).stage is Stage.LISTED

    def test_two_sales_in_one_month(self, store):
        first = store.create_vehicle(VehicleRecord(company_id="darkwater", acquisition_price=5000))
        CostLedger(store, first.id, CostKind.PART).add({"cost": 200})
        CostLedger(store, first.id, CostKind.SERVICE).add({"cost": 150})
        second = store.create_vehicle(VehicleRecord(company_id="darkwater", acquisition_price=3000))
        store.mark_sold(first.id, 6500, "2024-05-02")
        store.mark_sold(second.id, 3500, "2024-05-30T18:00:00Z")

        summary = MonthlyPerformanceAggregator.compute(store.load_accounts("darkwater", active=False))

        (may,) = summary.monthly_breakdown
        assert may.key == "2024-05"
        assert may.bikes_sold == 2
        assert may.total_revenue == 10000
        assert may.total_profit == 1650
        assert may.average_sale_price == 5000
        assert may.profit_margin == pytest.approx(16.5)
        assert summary.top_performing_months == [may]

    def test_deleting_vehicle_drops_it_from_rollups(self, store, bike):
        CostLedger(store, bike.id, CostKind.PART).add({"cost": 200})
        store.delete_vehicle(bike.id)
        summary = PortfolioSummarizer.compute(store.load_accounts("darkwater"))
        assert summary.total_bike_count == 0
        with pytest.raises(NotFoundError):
            store.load_account(bike.id)
