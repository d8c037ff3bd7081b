"""Per-vehicle financial snapshot.

Computes investment, projected profit (while the vehicle is active) and
actual profit (once it is sold) from a vehicle and its three cost
ledgers. Pure: no storage access, nothing cached.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from ..inventory.ledger import sum_costs
from ..inventory.lifecycle import LifecycleStateMachine
from ..inventory.models import CostEntry, VehicleAccount, VehicleRecord
from .models import FinancialSnapshot

logger = logging.getLogger(__name__)


def margin(profit: float, revenue: float) -> float:
    """Profit as a percentage of revenue; 0 when revenue is 0."""
    if not revenue:
        return 0.0
    result = profit / revenue * 100
    return result if math.isfinite(result) else 0.0


class FinancialAggregator:
    """Derive a FinancialSnapshot for one vehicle.

    Usage:
        snapshot = FinancialAggregator.compute(vehicle, parts, services, transportation)
        print(snapshot.total_investment, snapshot.actual_profit)
    """

    margin = staticmethod(margin)

    @staticmethod
    def compute(
        vehicle: VehicleRecord,
        parts: Iterable[CostEntry] = (),
        services: Iterable[CostEntry] = (),
        transportation: Iterable[CostEntry] = (),
    ) -> FinancialSnapshot:
        base = vehicle.acquisition_price or 0.0
        parts_cost = sum_costs(parts)
        services_cost = sum_costs(services)
        transportation_cost = sum_costs(transportation)
        sunk = math.fsum((base, parts_cost, services_cost, transportation_cost))

        snapshot = FinancialSnapshot(
            vehicle_id=vehicle.id,
            stage=vehicle.stage.value,
            is_active=LifecycleStateMachine.is_active(vehicle.stage),
            acquisition_price=base,
            parts_cost=parts_cost,
            services_cost=services_cost,
            transportation_cost=transportation_cost,
        )

        if snapshot.is_active:
            high_sale = vehicle.projected_high_sale
            low_sale = vehicle.projected_low_sale
            high_cost = vehicle.projected_high_cost
            low_cost = vehicle.projected_low_cost

            snapshot.projected_costs = high_cost
            snapshot.total_investment = sunk + high_cost
            snapshot.projected_value = high_sale
            snapshot.projected_high_profit = max(0.0, high_sale - low_cost - base)
            snapshot.projected_low_profit = max(0.0, low_sale - high_cost - base)
            snapshot.projected_high_margin = margin(snapshot.projected_high_profit, high_sale)
            snapshot.projected_low_margin = margin(snapshot.projected_low_profit, low_sale)
        else:
            snapshot.total_investment = sunk
            if vehicle.has_sale:
                sale = vehicle.actual_sale_price
                snapshot.actual_sale_price = sale
                snapshot.actual_profit = sale - sunk
                snapshot.margin_pct = margin(snapshot.actual_profit, sale)
            else:
                logger.debug("Sold vehicle %s has no sale price; profit undefined", vehicle.id)

        return snapshot

    @classmethod
    def compute_account(cls, account: VehicleAccount) -> FinancialSnapshot:
        return cls.compute(
            account.vehicle,
            account.parts,
            account.services,
            account.transportation,
        )
