"""SQLite-backed storage for vehicles and their cost ledgers.

Vehicles are partitioned by company_id. Each vehicle owns its part,
service and transportation entries; deleting the vehicle deletes them
through ON DELETE CASCADE.

No retries or locking happen here: concurrent writers are last-write-wins
and sqlite3 errors reach the caller unchanged.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..common.database import get_connection, init_db
from .lifecycle import LifecycleStateMachine, Stage, normalize_stage
from .models import (
    ENTRY_MODELS,
    CostEntry,
    CostKind,
    VehicleAccount,
    VehicleRecord,
)

logger = logging.getLogger(__name__)

COST_TABLES: dict[CostKind, str] = {
    CostKind.PART: "parts",
    CostKind.SERVICE: "services",
    CostKind.TRANSPORTATION: "transportation",
}

VEHICLE_COLUMNS = tuple(VehicleRecord.model_fields)

# Never overwritten by update_vehicle()
_VEHICLE_IMMUTABLE = frozenset({"id", "company_id", "created_at"})


class NotFoundError(ValueError):
    """Raised when a vehicle or cost entry id does not resolve."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _insert_sql(table: str, columns: tuple[str, ...]) -> str:
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join('?' * len(columns))})"
    )


def _update_sql(table: str, columns: tuple[str, ...]) -> str:
    assignments = ", ".join(f"{c} = ?" for c in columns if c != "id")
    return f"UPDATE {table} SET {assignments} WHERE id = ?"


class VehicleStore:
    """Vehicle and cost-entry persistence.

    Usage:
        store = VehicleStore("data/darkwater_ledger.db")
        bike = store.create_vehicle(VehicleRecord(company_id="darkwater", name="R1"))
        store.create_cost_entry(PartEntry(vehicle_id=bike.id, cost="200"))
        account = store.load_account(bike.id)
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = db_path
        init_db(db_path)

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    # --- Vehicles ---

    def create_vehicle(self, vehicle: VehicleRecord) -> VehicleRecord:
        now = _now()
        vehicle = vehicle.model_copy(update={"created_at": now, "updated_at": now})
        row = vehicle.model_dump(mode="json")
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    _insert_sql("vehicles", VEHICLE_COLUMNS),
                    [row[c] for c in VEHICLE_COLUMNS],
                )
        finally:
            conn.close()
        logger.info("Created vehicle %s (%s) for %s", vehicle.id, vehicle.name, vehicle.company_id)
        return vehicle

    def get_vehicle(self, vehicle_id: str) -> VehicleRecord:
        conn = self._connect()
        try:
            return self._fetch_vehicle(conn, vehicle_id)
        finally:
            conn.close()

    def list_vehicles(
        self,
        company_id: str,
        stage: Stage | str | None = None,
        active: bool | None = None,
    ) -> list[VehicleRecord]:
        """List a company's vehicles, optionally filtered.

        Filtering happens after stage normalization, so rows written with
        odd casing ("SOLD", "listed") still match.

        Args:
            company_id: Partition key.
            stage: Only vehicles in this stage.
            active: True for unsold vehicles, False for sold ones.
        """
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM vehicles WHERE company_id = ? ORDER BY created_at, id",
                (company_id,),
            ).fetchall()
        finally:
            conn.close()

        vehicles = [VehicleRecord.model_validate(dict(row)) for row in rows]
        if stage is not None:
            wanted = normalize_stage(stage)
            vehicles = [v for v in vehicles if v.stage is wanted]
        if active is not None:
            vehicles = [v for v in vehicles if LifecycleStateMachine.is_active(v.stage) == active]
        return vehicles

    def update_vehicle(self, vehicle_id: str, patch: dict[str, Any]) -> VehicleRecord:
        """Replace mutable fields of a vehicle and return the stored result."""
        conn = self._connect()
        try:
            with conn:
                current = self._fetch_vehicle(conn, vehicle_id)
                data = current.model_dump()
                for key, value in patch.items():
                    if key in _VEHICLE_IMMUTABLE:
                        continue
                    if key not in data:
                        logger.debug("Ignoring unknown vehicle field %r", key)
                        continue
                    data[key] = value
                data["updated_at"] = _now()
                updated = VehicleRecord.model_validate(data)
                row = updated.model_dump(mode="json")
                conn.execute(
                    _update_sql("vehicles", VEHICLE_COLUMNS),
                    [row[c] for c in VEHICLE_COLUMNS if c != "id"] + [vehicle_id],
                )
        finally:
            conn.close()
        return updated

    def set_stage(self, vehicle_id: str, stage: Stage | str) -> VehicleRecord:
        """Move a vehicle to any stage; no forward-only rule is applied."""
        vehicle = LifecycleStateMachine.transition(self.get_vehicle(vehicle_id), stage)
        return self.update_vehicle(vehicle_id, {"stage": vehicle.stage})

    def mark_sold(
        self,
        vehicle_id: str,
        sale_price: Any,
        date_sold: Any,
    ) -> VehicleRecord:
        """Record the sale figures and move the vehicle to Sold."""
        vehicle = self.update_vehicle(vehicle_id, {
            "actual_sale_price": sale_price,
            "date_sold": date_sold,
            "stage": Stage.SOLD,
        })
        logger.info(
            "Vehicle %s sold for %s on %s",
            vehicle_id, vehicle.actual_sale_price, vehicle.date_sold,
        )
        return vehicle

    def delete_vehicle(self, vehicle_id: str) -> VehicleRecord:
        """Delete a vehicle and, by cascade, all of its cost entries."""
        conn = self._connect()
        try:
            with conn:
                vehicle = self._fetch_vehicle(conn, vehicle_id)
                conn.execute("DELETE FROM vehicles WHERE id = ?", (vehicle_id,))
        finally:
            conn.close()
        logger.info("Deleted vehicle %s and its cost entries", vehicle_id)
        return vehicle

    # --- Cost entries ---

    def create_cost_entry(self, entry: CostEntry) -> CostEntry:
        now = _now()
        entry = entry.model_copy(update={"created_at": now, "updated_at": now})
        table = COST_TABLES[entry.kind]
        columns = tuple(type(entry).model_fields)
        row = entry.model_dump(mode="json")
        conn = self._connect()
        try:
            with conn:
                self._fetch_vehicle(conn, entry.vehicle_id)
                conn.execute(_insert_sql(table, columns), [row[c] for c in columns])
        finally:
            conn.close()
        logger.debug("Added %s entry %s to vehicle %s", entry.kind.value, entry.id, entry.vehicle_id)
        return entry

    def get_cost_entry(self, kind: CostKind, entry_id: str) -> CostEntry:
        conn = self._connect()
        try:
            return self._fetch_entry(conn, CostKind(kind), entry_id)
        finally:
            conn.close()

    def list_cost_entries(self, vehicle_id: str, kind: CostKind) -> list[CostEntry]:
        """Entries of one ledger, most recent date first."""
        conn = self._connect()
        try:
            return self._fetch_entries(conn, vehicle_id, CostKind(kind))
        finally:
            conn.close()

    def update_cost_entry(
        self,
        kind: CostKind,
        entry_id: str,
        patch: dict[str, Any],
    ) -> CostEntry:
        kind = CostKind(kind)
        model = ENTRY_MODELS[kind]
        table = COST_TABLES[kind]
        columns = tuple(model.model_fields)
        conn = self._connect()
        try:
            with conn:
                current = self._fetch_entry(conn, kind, entry_id)
                data = current.model_dump()
                for key, value in patch.items():
                    if key in model.IMMUTABLE_FIELDS:
                        continue
                    if key not in data:
                        logger.debug("Ignoring unknown %s field %r", kind.value, key)
                        continue
                    data[key] = value
                data["updated_at"] = _now()
                updated = model.model_validate(data)
                row = updated.model_dump(mode="json")
                conn.execute(
                    _update_sql(table, columns),
                    [row[c] for c in columns if c != "id"] + [entry_id],
                )
        finally:
            conn.close()
        return updated

    def delete_cost_entry(self, kind: CostKind, entry_id: str) -> CostEntry:
        """Delete one entry and return it.

        The lookup and the delete share one transaction, so a reader never
        sees a half-applied removal.
        """
        kind = CostKind(kind)
        conn = self._connect()
        try:
            with conn:
                entry = self._fetch_entry(conn, kind, entry_id)
                conn.execute(f"DELETE FROM {COST_TABLES[kind]} WHERE id = ?", (entry_id,))
        finally:
            conn.close()
        logger.debug("Removed %s entry %s from vehicle %s", kind.value, entry_id, entry.vehicle_id)
        return entry

    def load_account(self, vehicle_id: str) -> VehicleAccount:
        """A vehicle and its three ledgers, read over a single connection."""
        conn = self._connect()
        try:
            with conn:
                vehicle = self._fetch_vehicle(conn, vehicle_id)
                return VehicleAccount(
                    vehicle=vehicle,
                    parts=self._fetch_entries(conn, vehicle_id, CostKind.PART),
                    services=self._fetch_entries(conn, vehicle_id, CostKind.SERVICE),
                    transportation=self._fetch_entries(conn, vehicle_id, CostKind.TRANSPORTATION),
                )
        finally:
            conn.close()

    def load_accounts(
        self,
        company_id: str,
        active: bool | None = None,
    ) -> list[VehicleAccount]:
        return [
            self.load_account(vehicle.id)
            for vehicle in self.list_vehicles(company_id, active=active)
        ]

    # --- Row helpers ---

    @staticmethod
    def _fetch_vehicle(conn: sqlite3.Connection, vehicle_id: str) -> VehicleRecord:
        row = conn.execute("SELECT * FROM vehicles WHERE id = ?", (vehicle_id,)).fetchone()
        if not row:
            raise NotFoundError("Vehicle", vehicle_id)
        return VehicleRecord.model_validate(dict(row))

    @staticmethod
    def _fetch_entry(conn: sqlite3.Connection, kind: CostKind, entry_id: str) -> CostEntry:
        row = conn.execute(
            f"SELECT * FROM {COST_TABLES[kind]} WHERE id = ?", (entry_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"{kind.value.capitalize()} entry", entry_id)
        return ENTRY_MODELS[kind].model_validate(dict(row))

    @staticmethod
    def _fetch_entries(
        conn: sqlite3.Connection, vehicle_id: str, kind: CostKind
    ) -> list[CostEntry]:
        rows = conn.execute(
            f"""SELECT * FROM {COST_TABLES[kind]} WHERE vehicle_id = ?
                ORDER BY date IS NULL, date DESC, created_at DESC""",
            (vehicle_id,),
        ).fetchall()
        model = ENTRY_MODELS[kind]
        return [model.model_validate(dict(row)) for row in rows]
