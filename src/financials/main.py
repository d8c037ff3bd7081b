"""CLI entry point for Darkwater Ledger financials.

Usage:
    python -m src.financials.main import --file data/raw/bikes.json
    python -m src.financials.main snapshot --vehicle-id 64f1c0ffee
    python -m src.financials.main portfolio --cash 50000 --equipment 25000
    python -m src.financials.main performance
    python -m src.financials.main report --output data/exports/financials.json

    # Another company and database:
    python -m src.financials.main --company riverside --db data/riverside.db portfolio
"""

from __future__ import annotations

import argparse
import json
import logging

from ..common.config import settings
from ..common.logging import setup_logging
from ..inventory.importer import import_documents, load_import_file
from ..inventory.lifecycle import LifecycleStateMachine
from ..inventory.store import VehicleStore
from .aggregator import FinancialAggregator
from .exporter import FinancialReportExporter
from .monthly import MonthlyPerformanceAggregator
from .portfolio import PortfolioSummarizer

logger = logging.getLogger(__name__)


def _money(value: float | None) -> str:
    return "-" if value is None else f"{value:,.2f}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Darkwater Ledger: vehicle financials")
    parser.add_argument(
        "--company",
        type=str,
        default=settings.default_company,
        help="Company partition (default: %(default)s)",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="SQLite database path (default: from config/settings.yaml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")

    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Import bike and cost documents from JSON")
    p_import.add_argument("--file", type=str, required=True, help="JSON document file")

    p_snapshot = sub.add_parser("snapshot", help="Financial snapshot of one vehicle")
    p_snapshot.add_argument("--vehicle-id", type=str, required=True, help="Vehicle id")

    p_portfolio = sub.add_parser("portfolio", help="Totals across active inventory")
    p_portfolio.add_argument("--cash", type=float, help="Cash on hand")
    p_portfolio.add_argument("--equipment", type=float, help="Equipment value")

    p_perf = sub.add_parser("performance", help="Monthly sales performance")
    p_perf.add_argument(
        "--top",
        type=int,
        default=settings.financial.top_months,
        help="Number of top months (default: %(default)s)",
    )

    p_report = sub.add_parser("report", help="Full company financial report")
    p_report.add_argument("--cash", type=float, help="Cash on hand")
    p_report.add_argument("--equipment", type=float, help="Equipment value")
    p_report.add_argument("--output", type=str, help="Output JSON file path")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    store = VehicleStore(args.db or settings.database_abs_path)
    company = args.company

    if args.command == "import":
        result = import_documents(store, company, load_import_file(args.file))
        logger.info("=== Import into %s ===", company)
        logger.info("  %s", json.dumps(result.to_dict()))

    elif args.command == "snapshot":
        account = store.load_account(args.vehicle_id)
        vehicle = account.vehicle
        snapshot = FinancialAggregator.compute_account(account)
        progress = LifecycleStateMachine.progress(vehicle.stage)

        logger.info("=== %s (%s %s) ===", vehicle.name or vehicle.id, vehicle.brand, vehicle.model)
        logger.info(
            "  Stage: %s (step %d/%d, %.0f%%)",
            vehicle.stage.value, progress.current_step, progress.total_steps, progress.percentage,
        )
        for key, value in snapshot.to_dict().items():
            if isinstance(value, float):
                logger.info("  %s: %s", key, _money(value))

    elif args.command == "portfolio":
        cash = settings.financial.cash_on_hand if args.cash is None else args.cash
        equipment = settings.financial.equipment_value if args.equipment is None else args.equipment
        summary = PortfolioSummarizer.compute(store.load_accounts(company, active=True), cash, equipment)

        logger.info("=== Portfolio: %s ===", company)
        for key, value in summary.to_dict().items():
            logger.info("  %s: %s", key, value if isinstance(value, int) else _money(value))

    elif args.command == "performance":
        summary = MonthlyPerformanceAggregator.compute(
            store.load_accounts(company, active=False), top_n=args.top,
        )
        logger.info("=== Performance: %s ===", company)
        logger.info(
            "  Sold: %d, revenue %s, profit %s, margin %.1f%%",
            summary.total_sold,
            _money(summary.total_revenue),
            _money(summary.total_profit),
            summary.average_profit_margin,
        )
        for record in summary.monthly_breakdown:
            logger.info(
                "  %s %d: %d sold, revenue %s, profit %s (%.1f%%)",
                record.month_name, record.year, record.bikes_sold,
                _money(record.total_revenue), _money(record.total_profit), record.profit_margin,
            )
        for rank, record in enumerate(summary.top_performing_months, 1):
            logger.info("  #%d %s: profit %s", rank, record.key, _money(record.total_profit))

    elif args.command == "report":
        exporter = FinancialReportExporter(store)
        report = exporter.export_company(
            company, args.cash, args.equipment, output_path=args.output, write=True,
        )
        logger.info("=== Report: %s ===", company)
        logger.info("  Vehicles: %d", len(report.vehicles))
        logger.info("  Total assets: %s", _money(report.portfolio.total_assets))
        logger.info("  Total profit: %s", _money(report.performance.total_profit))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
