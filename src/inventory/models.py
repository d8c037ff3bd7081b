"""Pydantic models for inventory units and their cost ledgers.

Numbers and dates arrive from operators and from the document store in
whatever shape they were typed in. Validation is lenient:
unparsable amounts become 0 and unparsable dates become None, so a
half-filled record never blocks a financial rollup.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .lifecycle import Stage, normalize_stage

logger = logging.getLogger(__name__)

# Alias for annotating a field that is itself called "date"
_Date = date

# A whole numeric field, like "75.00", ".5" or "1e3"; "12abc" is not a number
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# Placeholders the intake forms store for "not applicable"
_EMPTY_MARKERS = {"", "n/a", "na", "none", "null", "-"}


def new_id() -> str:
    return uuid.uuid4().hex


def parse_amount(value: Any) -> float | None:
    """Parse a currency amount, returning None when nothing usable is there.

    Accepts numbers and strings such as "1,250.50" or "$75". Booleans,
    NaN and infinities are treated as unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "").replace("$", "")
        if not _NUMBER_RE.match(value):
            return None
    try:
        number = float(value)
    except (OverflowError, TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_amount(value: Any, *, allow_negative: bool = False) -> float:
    """Coerce to a currency amount; missing or malformed input becomes 0."""
    number = parse_amount(value)
    if number is None:
        if value not in (None, ""):
            logger.debug("Coerced unparsable amount %r to 0", value)
        return 0.0
    if number < 0 and not allow_negative:
        return 0.0
    return number


def parse_date(value: Any) -> date | None:
    """Parse an ISO date or datetime; anything unparsable becomes None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("Unparsable date %r", value)
        return None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in _EMPTY_MARKERS:
        return None
    return text


# === Enums ===

class CostKind(str, Enum):
    """The three independent cost sub-ledgers of a vehicle."""
    PART = "part"
    SERVICE = "service"
    TRANSPORTATION = "transportation"


class ServiceLocation(str, Enum):
    """Where a service was performed."""
    IN_HOUSE = "In-House"
    OUT_SOURCED = "Out-Sourced"


# === Vehicle ===

class VehicleRecord(BaseModel):
    """One inventory unit tracked through the dealership pipeline."""

    id: str = Field(default_factory=new_id)
    company_id: str = ""

    # Descriptive, free-form
    name: str = ""
    brand: str = ""
    model: str = ""
    year: int | None = None
    vin: str = ""
    mileage: str = ""
    color: str = ""
    engine_displacement: str = ""
    horsepower: str = ""
    category: str = ""
    description: str = ""

    # Pricing
    acquisition_price: float = 0.0
    projected_high_sale: float = 0.0
    projected_low_sale: float = 0.0
    projected_high_cost: float = 0.0
    projected_low_cost: float = 0.0
    actual_list_price: float | None = None
    actual_sale_price: float | None = None
    date_acquired: date | None = None
    date_sold: date | None = None

    stage: Stage = Stage.ACQUISITION
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Keys of the previous document store → field names
    DOCUMENT_KEYS: ClassVar[dict[str, str]] = {
        "_id": "id",
        "companyId": "company_id",
        "price": "acquisition_price",
        "acquisitionPrice": "acquisition_price",
        "purchasePrice": "acquisition_price",
        "boughtFor": "acquisition_price",
        "acquiredPrice": "acquisition_price",
        "status": "stage",
        "projectedHighSale": "projected_high_sale",
        "projectedLowSale": "projected_low_sale",
        "projectedCosts": "projected_high_cost",
        "projectedHighCost": "projected_high_cost",
        "projectedLowCost": "projected_low_cost",
        "actualListPrice": "actual_list_price",
        "actualSalePrice": "actual_sale_price",
        "soldPrice": "actual_sale_price",
        "salePrice": "actual_sale_price",
        "sellingPrice": "actual_sale_price",
        "dateAcquired": "date_acquired",
        "dateSold": "date_sold",
        "engineDisplacement": "engine_displacement",
        "make": "brand",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    @field_validator(
        "acquisition_price",
        "projected_high_sale",
        "projected_low_sale",
        "projected_high_cost",
        "projected_low_cost",
        mode="before",
    )
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return coerce_amount(value)

    @field_validator("actual_list_price", "actual_sale_price", mode="before")
    @classmethod
    def _coerce_optional_price(cls, value: Any) -> float | None:
        number = parse_amount(value)
        if number is None:
            return None
        return max(number, 0.0)

    @field_validator("date_acquired", "date_sold", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Optional[_Date]:
        return parse_date(value)

    @field_validator("stage", mode="before")
    @classmethod
    def _normalize_stage(cls, value: Any) -> Stage:
        if value is None:
            return Stage.ACQUISITION
        return normalize_stage(value)

    @field_validator("year", mode="before")
    @classmethod
    def _lenient_year(cls, value: Any) -> int | None:
        number = parse_amount(value)
        return int(number) if number is not None else None

    @field_validator(
        "name", "brand", "model", "vin", "mileage", "color",
        "engine_displacement", "horsepower", "category", "description",
        mode="before",
    )
    @classmethod
    def _free_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_sold(self) -> bool:
        return self.stage is Stage.SOLD

    @property
    def has_sale(self) -> bool:
        """True when a non-zero sale price has been recorded."""
        return bool(self.actual_sale_price)

    @classmethod
    def from_document(cls, doc: dict) -> VehicleRecord:
        """Build a record from a camelCase document of the previous document store.

        Extended-JSON wrappers such as {"$oid": ...} and {"$date": ...}
        are unwrapped; unknown keys (images, audit fields) are dropped.
        Several keys name the same price; the first non-empty one wins.
        Embedded cost arrays are left to ``import_documents``.
        """
        data: dict[str, Any] = {}
        for key, value in doc.items():
            field_name = cls.DOCUMENT_KEYS.get(key, key)
            if field_name in cls.model_fields and not data.get(field_name):
                data[field_name] = _unwrap(value)
        if "id" in data:
            data["id"] = str(data["id"])
        if "company_id" in data:
            data["company_id"] = str(data["company_id"])
        return cls.model_validate(data)


def _unwrap(value: Any) -> Any:
    if isinstance(value, dict) and len(value) == 1:
        key = next(iter(value))
        if key in ("$oid", "$date", "$numberInt", "$numberDouble", "$numberDecimal"):
            return value[key]
    return value


# === Cost entries ===

class CostEntry(BaseModel):
    """Fields shared by every cost ledger entry."""

    kind: ClassVar[CostKind]

    id: str = Field(default_factory=new_id)
    vehicle_id: str
    cost: float = 0.0
    date: Optional[_Date] = None
    payment_type: str = ""
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Never replaced by an update patch
    IMMUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"id", "vehicle_id", "created_at"})

    @field_validator("cost", mode="before")
    @classmethod
    def _coerce_cost(cls, value: Any) -> float:
        return coerce_amount(value)

    @field_validator("date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Optional[_Date]:
        return parse_date(value)

    @field_validator("payment_type", "notes", mode="before")
    @classmethod
    def _free_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    DOCUMENT_KEYS: ClassVar[dict[str, str]] = {
        "_id": "id",
        "bikeId": "vehicle_id",
        "paymentType": "payment_type",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    @classmethod
    def from_document(cls, doc: dict, vehicle_id: str | None = None) -> CostEntry:
        """Build an entry from a camelCase cost document.

        ``vehicle_id`` replaces the document's bikeId, for imports where
        vehicles are re-keyed on the way in.
        """
        data: dict[str, Any] = {}
        for key, value in doc.items():
            field_name = cls.DOCUMENT_KEYS.get(key, key)
            if field_name in cls.model_fields and field_name not in data:
                data[field_name] = _unwrap(value)
        if vehicle_id is not None:
            data["vehicle_id"] = vehicle_id
        for key in ("id", "vehicle_id"):
            if key in data:
                data[key] = str(data[key])
        return cls.model_validate(data)


class PartEntry(CostEntry):
    """A part bought for a vehicle."""
    kind: ClassVar[CostKind] = CostKind.PART

    name: str = ""
    category: str = ""
    condition: str = ""
    supplier: str = ""


class ServiceEntry(CostEntry):
    """Labour on a vehicle, done in-house or by an outside shop."""
    kind: ClassVar[CostKind] = CostKind.SERVICE

    DOCUMENT_KEYS: ClassVar[dict[str, str]] = {
        **CostEntry.DOCUMENT_KEYS,
        "type": "service_type",
        "serviceLocation": "service_location",
        "serviceProvider": "service_provider",
    }

    title: str = ""
    service_type: str = ""
    service_location: ServiceLocation = ServiceLocation.IN_HOUSE
    hours: float | None = None
    technician: str | None = None
    service_provider: str | None = None

    @field_validator("service_location", mode="before")
    @classmethod
    def _normalize_location(cls, value: Any) -> ServiceLocation:
        if isinstance(value, ServiceLocation):
            return value
        text = str(value or "").strip().lower().replace("_", "-").replace(" ", "-")
        if text in ("out-sourced", "outsourced"):
            return ServiceLocation.OUT_SOURCED
        return ServiceLocation.IN_HOUSE

    @field_validator("hours", mode="before")
    @classmethod
    def _lenient_hours(cls, value: Any) -> float | None:
        number = parse_amount(value)
        return max(number, 0.0) if number is not None else None

    @field_validator("technician", "service_provider", mode="before")
    @classmethod
    def _placeholder_text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @model_validator(mode="after")
    def _clear_other_branch(self) -> ServiceEntry:
        # In-house work is billed by hours/technician, outsourced work by provider.
        if self.service_location is ServiceLocation.IN_HOUSE:
            self.service_provider = None
        else:
            self.hours = None
            self.technician = None
        return self


class TransportationEntry(CostEntry):
    """A haul of the vehicle to or from somewhere."""
    kind: ClassVar[CostKind] = CostKind.TRANSPORTATION

    type: str = ""
    location: str = ""
    company: str = ""


ENTRY_MODELS: dict[CostKind, type[CostEntry]] = {
    CostKind.PART: PartEntry,
    CostKind.SERVICE: ServiceEntry,
    CostKind.TRANSPORTATION: TransportationEntry,
}


class VehicleAccount(BaseModel):
    """A vehicle together with its three cost ledgers as read at one moment."""

    vehicle: VehicleRecord
    parts: list[PartEntry] = Field(default_factory=list)
    services: list[ServiceEntry] = Field(default_factory=list)
    transportation: list[TransportationEntry] = Field(default_factory=list)

    def entries(self, kind: CostKind) -> list[CostEntry]:
        return {
            CostKind.PART: self.parts,
            CostKind.SERVICE: self.services,
            CostKind.TRANSPORTATION: self.transportation,
        }[CostKind(kind)]
