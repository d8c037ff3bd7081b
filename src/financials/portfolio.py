"""Portfolio totals across the active (unsold) inventory."""

from __future__ import annotations

import logging
import math
from typing import Iterable

from ..inventory.lifecycle import LifecycleStateMachine
from ..inventory.models import VehicleAccount
from .aggregator import FinancialAggregator
from .models import PortfolioSummary

logger = logging.getLogger(__name__)


class PortfolioSummarizer:
    """Sum active vehicles' investment and projected value.

    Sold vehicles passed in are skipped, so callers may hand over a whole
    company's inventory.

    Usage:
        summary = PortfolioSummarizer.compute(store.load_accounts("darkwater"), 50000, 25000)
        print(summary.total_assets)
    """

    @staticmethod
    def compute(
        accounts: Iterable[VehicleAccount],
        cash: float = 0.0,
        equipment: float = 0.0,
    ) -> PortfolioSummary:
        investments: list[float] = []
        projected: list[float] = []
        for account in accounts:
            if not LifecycleStateMachine.is_active(account.vehicle.stage):
                continue
            snapshot = FinancialAggregator.compute_account(account)
            investments.append(snapshot.total_investment)
            projected.append(snapshot.projected_value or 0.0)

        summary = PortfolioSummary(
            total_inventory_value=math.fsum(investments),
            cash_on_hand=cash or 0.0,
            equipment_value=equipment or 0.0,
            total_bike_count=len(investments),
            total_projected_value=math.fsum(projected),
        )
        logger.info(
            "Portfolio: %d active bikes, inventory %.2f, assets %.2f",
            summary.total_bike_count,
            summary.total_inventory_value,
            summary.total_assets,
        )
        return summary
