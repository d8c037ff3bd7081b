"""Monthly sales performance over the sold inventory.

Sold vehicles are bucketed by the calendar month of date_sold. A vehicle
with no parsable sale date or no sale price is left out of the monthly
breakdown and the sold-portfolio totals.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from ..inventory.models import VehicleAccount
from .aggregator import FinancialAggregator
from .models import MonthlyPerformanceRecord, PerformanceSummary

logger = logging.getLogger(__name__)

DEFAULT_TOP_MONTHS = 3


class MonthlyPerformanceAggregator:
    """Group sold vehicles by month and rank the months by profit.

    Usage:
        summary = MonthlyPerformanceAggregator.compute(store.load_accounts("darkwater", active=False))
        for month in summary.top_performing_months:
            print(month.key, month.total_profit)
    """

    @staticmethod
    def compute(
        accounts: Iterable[VehicleAccount],
        top_n: int = DEFAULT_TOP_MONTHS,
    ) -> PerformanceSummary:
        revenue: dict[tuple[int, int], list[float]] = {}
        profit: dict[tuple[int, int], list[float]] = {}
        total_sold = 0

        for account in accounts:
            vehicle = account.vehicle
            if not vehicle.is_sold:
                continue
            total_sold += 1
            if vehicle.date_sold is None or not vehicle.has_sale:
                logger.debug("Excluding sold vehicle %s: no sale date or price", vehicle.id)
                continue

            snapshot = FinancialAggregator.compute_account(account)
            key = (vehicle.date_sold.year, vehicle.date_sold.month)
            revenue.setdefault(key, []).append(snapshot.actual_sale_price)
            profit.setdefault(key, []).append(snapshot.actual_profit)

        breakdown = [
            MonthlyPerformanceRecord(
                year=year,
                month=month,
                bikes_sold=len(revenue[(year, month)]),
                total_revenue=math.fsum(revenue[(year, month)]),
                total_profit=math.fsum(profit[(year, month)]),
            )
            for year, month in sorted(revenue, reverse=True)
        ]
        # sorted() is stable: months tied on profit keep the most-recent-first order
        top = sorted(breakdown, key=lambda r: r.total_profit, reverse=True)[:max(top_n, 0)]

        summary = PerformanceSummary(
            total_sold=total_sold,
            total_revenue=math.fsum(v for values in revenue.values() for v in values),
            total_profit=math.fsum(v for values in profit.values() for v in values),
            monthly_breakdown=breakdown,
            top_performing_months=top,
        )
        logger.info(
            "Performance: %d sold, %d months, revenue %.2f, profit %.2f",
            summary.total_sold,
            len(breakdown),
            summary.total_revenue,
            summary.total_profit,
        )
        return summary
