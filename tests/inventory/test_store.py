"""Tests for SQLite vehicle storage and document import."""

from __future__ import annotations

from datetime import date

import pytest

from src.financials.aggregator import FinancialAggregator
from src.inventory.importer import import_documents
from src.inventory.lifecycle import Stage
from src.inventory.models import (
    CostKind,
    PartEntry,
    ServiceEntry,
    TransportationEntry,
    VehicleRecord,
)
from src.inventory.store import NotFoundError


class TestVehicles:
    """Test vehicle CRUD."""

    def test_create_and_get(self, store, sample_vehicle_data):
        created = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        fetched = store.get_vehicle(created.id)
        assert fetched.name == "2019 Yamaha YZF-R6"
        assert fetched.acquisition_price == 5000
        assert fetched.date_acquired == date(2024, 2, 10)
        assert fetched.created_at is not None

    def test_get_unknown(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.get_vehicle("missing")
        assert isinstance(exc.value, ValueError)
        assert exc.value.entity_id == "missing"

    def test_list_partitioned_by_company(self, store, sample_vehicle_data):
        store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        store.create_vehicle(VehicleRecord(**{**sample_vehicle_data, "company_id": "riverside"}))
        assert len(store.list_vehicles("darkwater")) == 1
        assert len(store.list_vehicles("riverside")) == 1
        assert store.list_vehicles("nobody") == []

    def test_list_filters(self, store, sample_vehicle_data):
        store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        store.create_vehicle(VehicleRecord(**{**sample_vehicle_data, "stage": "sold"}))
        assert len(store.list_vehicles("darkwater", stage="SOLD")) == 1
        assert len(store.list_vehicles("darkwater", active=True)) == 1
        assert len(store.list_vehicles("darkwater", active=False)) == 1

    def test_update_keeps_identity(self, store, sample_vehicle_data):
        created = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        updated = store.update_vehicle(created.id, {
            "company_id": "riverside",
            "color": "Blue",
            "bogus": 1,
        })
        assert updated.company_id == "darkwater"
        assert updated.color == "Blue"
        assert store.get_vehicle(created.id).color == "Blue"

    def test_set_stage(self, store, sample_vehicle_data):
        created = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        assert store.set_stage(created.id, "media").stage is Stage.MEDIA
        assert store.get_vehicle(created.id).stage is Stage.MEDIA

    def test_mark_sold(self, store, sample_vehicle_data):
        created = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        sold = store.mark_sold(created.id, "6,500", "2024-03-15")
        assert sold.stage is Stage.SOLD
        assert sold.actual_sale_price == 6500
        assert store.get_vehicle(created.id).date_sold == date(2024, 3, 15)

    def test_delete_cascades(self, store, sample_vehicle_data, db_conn):
        created = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        store.create_cost_entry(PartEntry(vehicle_id=created.id, cost=10))
        store.create_cost_entry(ServiceEntry(vehicle_id=created.id, cost=20))
        store.create_cost_entry(TransportationEntry(vehicle_id=created.id, cost=30))

        removed = store.delete_vehicle(created.id)

        assert removed.id == created.id
        for table in ("parts", "services", "transportation"):
            count = db_conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            assert count == 0
        with pytest.raises(NotFoundError):
            store.get_vehicle(created.id)


class TestCostEntries:
    """Test cost entry storage."""

    def test_entry_requires_vehicle(self, store):
        with pytest.raises(NotFoundError):
            store.create_cost_entry(PartEntry(vehicle_id="missing", cost=10))

    def test_list_newest_first(self, store, sample_vehicle_data):
        bike = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        store.create_cost_entry(PartEntry(vehicle_id=bike.id, cost=1, date="2024-01-01"))
        store.create_cost_entry(PartEntry(vehicle_id=bike.id, cost=2, date="2024-03-01"))
        store.create_cost_entry(PartEntry(vehicle_id=bike.id, cost=3))
        costs = [e.cost for e in store.list_cost_entries(bike.id, CostKind.PART)]
        assert costs == [2, 1, 3]

    def test_service_round_trip(self, store, sample_vehicle_data):
        bike = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        created = store.create_cost_entry(ServiceEntry(
            vehicle_id=bike.id,
            service_location="Out-Sourced",
            service_provider="Moto Shop",
            cost=400,
        ))
        fetched = store.get_cost_entry(CostKind.SERVICE, created.id)
        assert fetched.service_provider == "Moto Shop"
        assert fetched.hours is None

    def test_delete_unknown(self, store):
        with pytest.raises(NotFoundError):
            store.delete_cost_entry(CostKind.TRANSPORTATION, "missing")

    def test_load_account(self, store, sample_vehicle_data):
        bike = store.create_vehicle(VehicleRecord(**sample_vehicle_data))
        store.create_cost_entry(PartEntry(vehicle_id=bike.id, cost=200))
        store.create_cost_entry(ServiceEntry(vehicle_id=bike.id, cost=150))
        account = store.load_account(bike.id)
        assert account.vehicle.id == bike.id
        assert [p.cost for p in account.parts] == [200]
        assert [s.cost for s in account.services] == [150]
        assert account.transportation == []


class TestImportDocuments:
    """Test bulk import from document-store JSON."""

    def test_import(self, store, sample_documents):
        result = import_documents(store, "darkwater", sample_documents)

        assert result.vehicles == 2
        assert result.cost_entries == {"part": 1, "service": 1, "transportation": 1}
        assert result.skipped == 0

        vehicles = store.list_vehicles("darkwater")
        assert {v.brand for v in vehicles} == {"Kawasaki", "Honda"}
        honda = store.load_account("65a1f0000000000000000002")
        assert honda.vehicle.is_sold
        assert honda.parts[0].cost == 200
        assert honda.services[0].technician == "Sam"

    def test_reimport_skips_existing(self, store, sample_documents):
        import_documents(store, "darkwater", sample_documents)
        result = import_documents(store, "darkwater", sample_documents)
        assert result.vehicles == 0
        assert result.skipped == 5
        assert len(store.list_vehicles("darkwater")) == 2

    def test_bare_list_and_orphans(self, store, sample_documents):
        result = import_documents(store, "darkwater", sample_documents["bikes"][:1])
        assert result.vehicles == 1

        orphan = {"parts": [{"bikeId": "nowhere", "cost": 5}, {"cost": 5}]}
        result = import_documents(store, "darkwater", orphan)
        assert result.skipped == 2

    def test_embedded_cost_arrays(self, store):
        bike = {
            "_id": "b1",
            "make": "Yamaha",
            "price": 5000,
            "status": "Listed",
            "parts": [{"name": "Brake pads", "cost": 200}],
            "services": [{"title": "Tune-up", "cost": "150", "serviceLocation": "In-House"}],
            "transportation": [{"type": "Pickup", "cost": 75}],
        }
        result = import_documents(store, "darkwater", [bike])

        assert result.vehicles == 1
        assert result.cost_entries == {"part": 1, "service": 1, "transportation": 1}

        account = store.load_account("b1")
        assert account.parts[0].vehicle_id == "b1"
        snapshot = FinancialAggregator.compute_account(account)
        assert snapshot.total_investment == 5425

    def test_embedded_entries_not_duplicated_on_reimport(self, store):
        bike = {"_id": "b2", "price": 1000, "parts": [{"cost": 40}, "junk"]}
        first = import_documents(store, "darkwater", [bike])
        assert first.cost_entries["part"] == 1
        assert first.skipped == 1

        second = import_documents(store, "darkwater", [bike])
        assert second.skipped == 1
        assert len(store.load_account("b2").parts) == 1
