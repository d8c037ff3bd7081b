"""Financials: per-vehicle snapshots, portfolio totals and monthly performance."""

from .aggregator import FinancialAggregator, margin
from .exporter import FinancialReportExporter
from .models import (
    FinancialSnapshot,
    MonthlyPerformanceRecord,
    PerformanceSummary,
    PortfolioSummary,
)
from .monthly import MonthlyPerformanceAggregator
from .portfolio import PortfolioSummarizer

__all__ = [
    "FinancialAggregator",
    "FinancialReportExporter",
    "FinancialSnapshot",
    "MonthlyPerformanceAggregator",
    "MonthlyPerformanceRecord",
    "PerformanceSummary",
    "PortfolioSummarizer",
    "PortfolioSummary",
    "margin",
]
