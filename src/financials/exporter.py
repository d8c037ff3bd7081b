"""Company financial report exporter.

Reads one company's vehicles and cost ledgers from the store, runs the
snapshot, portfolio and monthly rollups, validates the result against
CompanyFinancialReport and optionally writes it as JSON.

Output schema:
- Stage counts (per-stage plus total)
- Per-vehicle snapshots with pipeline progress
- Portfolio summary over the active inventory
- Performance summary over the sold inventory
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..common.config import DATA_EXPORTS_DIR, Settings, settings as default_settings
from ..common.models import CompanyFinancialReport
from ..inventory.lifecycle import LifecycleStateMachine
from ..inventory.models import VehicleAccount
from ..inventory.store import VehicleStore
from .aggregator import FinancialAggregator
from .monthly import MonthlyPerformanceAggregator
from .portfolio import PortfolioSummarizer

logger = logging.getLogger(__name__)


class FinancialReportExporter:
    """Build and export company financial reports.

    Usage:
        exporter = FinancialReportExporter(VehicleStore())
        report = exporter.export_company("darkwater", cash=50000, equipment=25000)
        print(report.portfolio.total_assets)
    """

    def __init__(
        self,
        store: VehicleStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store or VehicleStore(self.settings.database_abs_path)

    def build_report(
        self,
        company_id: str,
        accounts: list[VehicleAccount],
        cash: float | None = None,
        equipment: float | None = None,
    ) -> CompanyFinancialReport:
        """Assemble a report from already-loaded accounts."""
        financial = self.settings.financial
        cash = financial.cash_on_hand if cash is None else cash
        equipment = financial.equipment_value if equipment is None else equipment

        vehicles = []
        for account in accounts:
            vehicle = account.vehicle
            snapshot = FinancialAggregator.compute_account(account)
            vehicles.append({
                **snapshot.to_dict(),
                "name": vehicle.name,
                "brand": vehicle.brand,
                "model": vehicle.model,
                "year": vehicle.year,
                "progress_pct": round(LifecycleStateMachine.progress(vehicle.stage).percentage, 1),
            })

        portfolio = PortfolioSummarizer.compute(accounts, cash, equipment)
        performance = MonthlyPerformanceAggregator.compute(accounts, top_n=financial.top_months)

        report = CompanyFinancialReport.model_validate({
            "company_id": company_id,
            "generated_at": datetime.now(timezone.utc),
            "stage_counts": LifecycleStateMachine.count_by_stage(a.vehicle for a in accounts),
            "vehicles": vehicles,
            "portfolio": portfolio.to_dict(),
            "performance": performance.to_dict(),
        })

        errors = _verify_report(report)
        if errors:
            logger.error("Report verification FAILED for %s: %s", company_id, errors)
        return report

    def export_company(
        self,
        company_id: str,
        cash: float | None = None,
        equipment: float | None = None,
        output_path: str | Path | None = None,
        write: bool = False,
    ) -> CompanyFinancialReport:
        """Build a company's report; write JSON when a path is given or ``write`` is set.

        Args:
            company_id: Company partition to report on.
            cash: Cash on hand; defaults to the configured value.
            equipment: Equipment value; defaults to the configured value.
            output_path: JSON destination. Defaults to
                data/exports/financials_<company>.json when ``write`` is set.
            write: Write to the default location even without ``output_path``.

        Returns:
            The validated CompanyFinancialReport.
        """
        accounts = self.store.load_accounts(company_id)
        report = self.build_report(company_id, accounts, cash, equipment)

        if output_path is None and write:
            safe_company = company_id.replace(" ", "_")
            output_path = DATA_EXPORTS_DIR / f"financials_{safe_company}.json"

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(report.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
            logger.info(
                "Exported financials for %s (%d vehicles) -> %s",
                company_id, len(report.vehicles), output_path,
            )
        return report


# ================================================================
# Helper functions
# ================================================================

def _verify_report(report: CompanyFinancialReport) -> list[str]:
    """Cross-check the rollups against the per-vehicle snapshots."""
    errors: list[str] = []
    active = [v for v in report.vehicles if v.is_active]
    if report.portfolio.total_bike_count != len(active):
        errors.append(
            f"portfolio counts {report.portfolio.total_bike_count} bikes, "
            f"{len(active)} active snapshots"
        )
    if report.stage_counts.get("total", 0) != len(report.vehicles):
        errors.append("stage count total does not match vehicle count")
    monthly_sold = sum(m.bikes_sold for m in report.performance.monthly_breakdown)
    if monthly_sold > report.performance.total_sold:
        errors.append(
            f"monthly breakdown counts {monthly_sold} sales, "
            f"total_sold is {report.performance.total_sold}"
        )
    return errors
