"""Inventory: vehicle records, lifecycle stages and cost ledgers."""

from .ledger import CostLedger, sum_costs
from .lifecycle import LifecycleStateMachine, Stage, StageProgress, normalize_stage
from .models import (
    CostEntry,
    CostKind,
    PartEntry,
    ServiceEntry,
    ServiceLocation,
    TransportationEntry,
    VehicleAccount,
    VehicleRecord,
)
from .importer import ImportResult, import_documents, load_import_file
from .store import NotFoundError, VehicleStore

__all__ = [
    "CostEntry",
    "CostKind",
    "CostLedger",
    "ImportResult",
    "LifecycleStateMachine",
    "NotFoundError",
    "PartEntry",
    "ServiceEntry",
    "ServiceLocation",
    "Stage",
    "StageProgress",
    "TransportationEntry",
    "VehicleAccount",
    "VehicleRecord",
    "VehicleStore",
    "import_documents",
    "load_import_file",
    "normalize_stage",
    "sum_costs",
]
