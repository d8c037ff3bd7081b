"""Shared test fixtures for Darkwater Ledger."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings
from src.common.database import get_connection, init_db
from src.inventory.models import VehicleRecord
from src.inventory.store import VehicleStore


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Provide the path of an initialized temporary SQLite database."""
    db_file = tmp_path / "test_ledger.db"
    init_db(db_file)
    return db_file


@pytest.fixture
def db_conn(temp_db):
    """Provide an initialized SQLite connection from temp_db."""
    conn = get_connection(temp_db)
    yield conn
    conn.close()


@pytest.fixture
def store(temp_db) -> VehicleStore:
    """A VehicleStore over the temporary database."""
    return VehicleStore(temp_db)


@pytest.fixture
def test_settings(temp_db) -> Settings:
    """Settings pointing at the temporary database with dashboard defaults."""
    return Settings(
        database={"db_path": str(temp_db)},
        financial={"cash_on_hand": 50000, "equipment_value": 25000, "top_months": 3},
    )


@pytest.fixture
def sample_vehicle_data() -> dict:
    """Return sample intake data for an active bike."""
    return {
        "company_id": "darkwater",
        "name": "2019 Yamaha YZF-R6",
        "brand": "Yamaha",
        "model": "YZF-R6",
        "year": 2019,
        "vin": "JYARJ27E0KA000001",
        "mileage": "8200",
        "acquisition_price": 5000,
        "projected_high_sale": 8000,
        "projected_low_sale": 6500,
        "projected_high_cost": 300,
        "projected_low_cost": 100,
        "date_acquired": "2024-02-10",
        "stage": "Servicing",
    }


@pytest.fixture
def active_vehicle(sample_vehicle_data) -> VehicleRecord:
    return VehicleRecord(id="bike-active", **sample_vehicle_data)


@pytest.fixture
def sold_vehicle(sample_vehicle_data) -> VehicleRecord:
    data = {
        **sample_vehicle_data,
        "stage": "Sold",
        "actual_sale_price": 6500,
        "date_sold": "2024-03-15",
    }
    return VehicleRecord(id="bike-sold", **data)


@pytest.fixture
def sample_documents() -> dict:
    """Return bike and cost documents in the previous document-store shape."""
    return {
        "bikes": [
            {
                "_id": {"$oid": "65a1f0000000000000000001"},
                "companyId": {"$oid": "65a100000000000000000000"},
                "make": "Kawasaki",
                "model": "Ninja 650",
                "year": "2021",
                "price": "4,200",
                "projectedHighSale": 6000,
                "projectedLowSale": 5200,
                "projectedCosts": 400,
                "status": "listed",
                "dateAcquired": {"$date": "2024-01-05T00:00:00Z"},
            },
            {
                "_id": {"$oid": "65a1f0000000000000000002"},
                "make": "Honda",
                "model": "CBR600RR",
                "price": 5000,
                "status": "SOLD",
                "actualSalePrice": "6500",
                "dateSold": "2024-03-20T15:30:00.000Z",
            },
        ],
        "parts": [
            {
                "_id": {"$oid": "65a2f0000000000000000001"},
                "bikeId": {"$oid": "65a1f0000000000000000002"},
                "name": "Chain kit",
                "cost": "200",
                "date": "2024-02-01",
            },
        ],
        "services": [
            {
                "_id": {"$oid": "65a3f0000000000000000001"},
                "bikeId": {"$oid": "65a1f0000000000000000002"},
                "title": "Valve check",
                "type": "Maintenance",
                "serviceLocation": "In-House",
                "hours": "3",
                "technician": "Sam",
                "serviceProvider": "N/A",
                "cost": 150,
                "date": "2024-02-15",
            },
        ],
        "transportation": [
            {
                "_id": {"$oid": "65a4f0000000000000000001"},
                "bikeId": {"$oid": "65a1f0000000000000000001"},
                "type": "Pickup",
                "location": "Tacoma",
                "company": "U-Ship",
                "cost": "75.50",
                "date": "2024-01-06",
            },
        ],
    }
