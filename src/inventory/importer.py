"""Bulk import of vehicles and cost entries from JSON documents.

Accepts documents in the camelCase shape of the dealership's previous
document store, either a bare list of bike documents or an object:

    {
        "bikes": [...],
        "parts": [...],
        "services": [...],
        "transportation": [...]
    }

Cost documents reference their bike through ``bikeId``. A bike document
may also embed its own ``parts``, ``services`` and ``transportation``
arrays; those entries are filed under that bike. Records whose id already
exists are skipped, so re-running an import is harmless.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import ENTRY_MODELS, CostKind, VehicleRecord
from .store import NotFoundError, VehicleStore

logger = logging.getLogger(__name__)

# Arrays a bike document may embed, by cost kind
_EMBEDDED_KEYS: dict[CostKind, str] = {
    CostKind.PART: "parts",
    CostKind.SERVICE: "services",
    CostKind.TRANSPORTATION: "transportation",
}

# Top-level keys accepted for each collection
_VEHICLE_KEYS = ("bikes", "vehicles", "bikeInventory")
_COST_KEYS: dict[CostKind, tuple[str, ...]] = {
    CostKind.PART: ("parts",),
    CostKind.SERVICE: ("services", "service"),
    CostKind.TRANSPORTATION: ("transportation", "transport"),
}


@dataclass
class ImportResult:
    """Counts of what an import wrote and skipped."""

    vehicles: int = 0
    cost_entries: dict[str, int] = field(
        default_factory=lambda: {kind.value: 0 for kind in CostKind}
    )
    skipped: int = 0

    def to_dict(self) -> dict:
        return {
            "vehicles": self.vehicles,
            "cost_entries": dict(self.cost_entries),
            "skipped": self.skipped,
        }


def load_import_file(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _collection(payload: dict, keys: tuple[str, ...]) -> list[dict]:
    for key in keys:
        if key in payload:
            return payload[key] or []
    return []


def _import_embedded(store: VehicleStore, vehicle_id: str, doc: dict, result: ImportResult) -> None:
    for kind, key in _EMBEDDED_KEYS.items():
        model = ENTRY_MODELS[kind]
        for sub in doc.get(key) or []:
            if not isinstance(sub, dict):
                result.skipped += 1
                continue
            entry = model.from_document(sub, vehicle_id=vehicle_id)
            try:
                store.create_cost_entry(entry)
            except sqlite3.IntegrityError:
                logger.info("Skipped %s entry %s: already imported", kind.value, entry.id)
                result.skipped += 1
                continue
            result.cost_entries[kind.value] += 1


def import_documents(store: VehicleStore, company_id: str, payload: Any) -> ImportResult:
    """Insert every vehicle and cost document of ``payload`` into the store.

    Every vehicle is filed under ``company_id``, whatever companyId the
    document carries. Cost entries without a known bike are skipped.
    """
    if isinstance(payload, list):
        payload = {"bikes": payload}

    result = ImportResult()

    for doc in _collection(payload, _VEHICLE_KEYS):
        vehicle = VehicleRecord.from_document(doc).model_copy(update={"company_id": company_id})
        try:
            store.create_vehicle(vehicle)
        except sqlite3.IntegrityError:
            logger.info("Skipped vehicle %s: already imported", vehicle.id)
            result.skipped += 1
            continue
        result.vehicles += 1
        _import_embedded(store, vehicle.id, doc, result)

    for kind, keys in _COST_KEYS.items():
        model = ENTRY_MODELS[kind]
        for doc in _collection(payload, keys):
            if not doc.get("bikeId"):
                logger.warning("Skipped %s document without bikeId", kind.value)
                result.skipped += 1
                continue
            entry = model.from_document(doc)
            try:
                store.create_cost_entry(entry)
            except NotFoundError:
                logger.warning("Skipped %s entry %s: unknown bike %s", kind.value, entry.id, entry.vehicle_id)
                result.skipped += 1
                continue
            except sqlite3.IntegrityError:
                logger.info("Skipped %s entry %s: already imported", kind.value, entry.id)
                result.skipped += 1
                continue
            result.cost_entries[kind.value] += 1

    logger.info(
        "Imported %d vehicles and %d cost entries for %s (%d skipped)",
        result.vehicles,
        sum(result.cost_entries.values()),
        company_id,
        result.skipped,
    )
    return result
