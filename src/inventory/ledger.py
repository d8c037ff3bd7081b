"""Per-vehicle cost ledgers (parts, services, transportation).

A CostLedger is a thin view over the store scoped to one vehicle and one
kind of cost. It does no locking: two operators editing the same entry
are last-write-wins.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from .models import ENTRY_MODELS, CostEntry, CostKind
from .store import NotFoundError, VehicleStore

logger = logging.getLogger(__name__)


def sum_costs(entries: Iterable[CostEntry]) -> float:
    """Total cost of a collection of entries; empty collections sum to 0.

    Uses math.fsum so the total does not depend on entry order.
    """
    return math.fsum(entry.cost for entry in entries)


class CostLedger:
    """One vehicle's entries of one cost kind.

    Usage:
        parts = CostLedger(store, vehicle_id, CostKind.PART)
        parts.add({"name": "Chain kit", "cost": "149.99"})
        print(parts.total())
    """

    def __init__(self, store: VehicleStore, vehicle_id: str, kind: CostKind) -> None:
        self.store = store
        self.vehicle_id = vehicle_id
        self.kind = CostKind(kind)
        self.model = ENTRY_MODELS[self.kind]

    def add(self, entry: CostEntry | dict[str, Any]) -> CostEntry:
        """Store a new entry under a fresh id; cost is coerced to >= 0."""
        if isinstance(entry, CostEntry):
            data = entry.model_dump(exclude={"id", "created_at", "updated_at"})
        else:
            data = {k: v for k, v in entry.items() if k not in ("id", "created_at", "updated_at")}
        data["vehicle_id"] = self.vehicle_id
        return self.store.create_cost_entry(self.model.model_validate(data))

    def update(self, entry_id: str, patch: dict[str, Any]) -> CostEntry:
        self._check_owner(entry_id)
        return self.store.update_cost_entry(self.kind, entry_id, patch)

    def remove(self, entry_id: str) -> CostEntry:
        """Delete an entry and return it so callers can confirm the removal."""
        self._check_owner(entry_id)
        return self.store.delete_cost_entry(self.kind, entry_id)

    def entries(self) -> list[CostEntry]:
        return self.store.list_cost_entries(self.vehicle_id, self.kind)

    def total(self) -> float:
        return sum_costs(self.entries())

    def _check_owner(self, entry_id: str) -> None:
        entry = self.store.get_cost_entry(self.kind, entry_id)
        if entry.vehicle_id != self.vehicle_id:
            # An id from another vehicle's ledger is unknown to this one.
            raise NotFoundError(f"{self.kind.value.capitalize()} entry", entry_id)
