from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Sequence

from plan_comparator import compare, excel_reader
from plan_comparator.config import AuditConfig
from plan_comparator.excel_writer import (
    ExportUnavailableError,
    OpenpyxlSerializer,
    WorkbookSerializer,
    write_workbook,
)
from plan_comparator.model import Plan, PlanComparison, SideLabels
from plan_comparator.report import (
    build_text_report,
    iso_timestamp,
    write_report_to_json,
    write_text_report,
)
from plan_comparator.workbook import build_workbook

logger = logging.getLogger(__name__)

DEFAULT_REPORT_NAME = "plan_report.txt"
DEFAULT_JSON_NAME = "plan_report.json"
DEFAULT_LEFT_SHEET = "OneKonnect"
DEFAULT_RIGHT_SHEET = "Puzzle"


class AuditSession:
    """Holds the most recent comparison for reuse by report and export.

    Owned by the caller; a failed export leaves ``results`` untouched so the
    export can be retried without comparing again.
    """

    def __init__(self, labels: SideLabels | None = None) -> None:
        self.labels = labels or SideLabels()
        self._results: List[PlanComparison] = []

    @property
    def results(self) -> List[PlanComparison]:
        return list(self._results)

    def compare(
        self, left_plans: Sequence[Plan], right_plans: Sequence[Plan]
    ) -> List[PlanComparison]:
        self._results = compare.compare_sides(left_plans, right_plans)
        logger.debug("Compared %d plans", len(self._results))
        return self.results

    def text_report(self, generated_at: str | None = None) -> str:
        return build_text_report(
            self._results, generated_at or iso_timestamp(), self.labels
        )

    def export_workbook(
        self,
        serializer: WorkbookSerializer,
        output_dir: Path,
        *,
        project_name: str | None = None,
        today: date | None = None,
    ) -> Path:
        workbook = build_workbook(self._results, self.labels)
        return write_workbook(
            workbook,
            output_dir,
            serializer,
            project_name=project_name,
            today=today,
        )


@dataclass(slots=True)
class AuditOutcome:
    """Paths and results produced by :func:`run_plan_audit`."""

    report_path: Path
    json_path: Path | None = None
    workbook_path: Path | None = None
    export_error: str | None = None
    results: List[PlanComparison] = field(default_factory=list)


def run_plan_audit(
    workbook_path: str | Path,
    *,
    left_sheet: str = DEFAULT_LEFT_SHEET,
    right_sheet: str = DEFAULT_RIGHT_SHEET,
    config: AuditConfig | None = None,
    serializer: WorkbookSerializer | None = None,
    today: date | None = None,
) -> AuditOutcome:
    """Compare both sources and write the text report and Excel workbook.

    Input errors propagate. An unavailable spreadsheet serializer does not
    fail the run: the text report is still written and the outcome carries
    the export error message.
    """

    config = config or AuditConfig()
    labels = SideLabels(left=config.left_label, right=config.right_label)
    output_dir = Path(config.output_dir)

    # 1. Read plans for both sources
    left_plans = excel_reader.extract_plans(Path(workbook_path), left_sheet)
    right_plans = excel_reader.extract_plans(Path(workbook_path), right_sheet)

    # 2. Compare
    session = AuditSession(labels)
    results = session.compare(left_plans, right_plans)

    # 3. Text and JSON reports share one timestamp
    generated_at = iso_timestamp()
    outcome = AuditOutcome(
        report_path=write_text_report(
            results, output_dir / DEFAULT_REPORT_NAME, generated_at, labels
        ),
        json_path=write_report_to_json(
            results, output_dir / DEFAULT_JSON_NAME, generated_at, labels
        ),
        results=results,
    )

    # 4. Workbook export
    try:
        outcome.workbook_path = session.export_workbook(
            serializer or OpenpyxlSerializer(),
            output_dir,
            project_name=config.project_name,
            today=today,
        )
    except ExportUnavailableError as exc:
        logger.error("Excel export failed: %s", exc.detail or exc)
        outcome.export_error = str(exc)

    return outcome


__all__ = ["AuditOutcome", "AuditSession", "run_plan_audit"]
