"""Excel extraction of plan rosters.

Each source lives on its own worksheet. The header row names a ``Plan``
column plus one column per section title; every data row adds names to the
plan named in its ``Plan`` cell. A cell may hold several names, one per line.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path  # Filesystem path management
from typing import Dict, List, Mapping

from openpyxl import load_workbook  # Excel file loader

from plan_comparator.model import SECTION_KEYS, SECTION_TITLES, Plan

logger = logging.getLogger(__name__)

PLAN_COLUMN = "Plan"

_LINE_BREAK = re.compile(r"\r?\n")


def parse_names(text: str | None) -> List[str]:
    """Split multi-line text into trimmed, non-empty names."""

    if not text:
        return []
    return [line.strip() for line in _LINE_BREAK.split(text) if line.strip()]


def build_plan(name: str | None, sections_text: Mapping[str, str]) -> Plan | None:
    """Return a :class:`Plan` from free text, or ``None`` for an unnamed plan."""

    plan_name = (name or "").strip()
    if not plan_name:
        return None
    sections = {
        key: tuple(parse_names(sections_text.get(key))) for key in SECTION_KEYS
    }
    return Plan(name=plan_name, sections=sections)


def extract_plans(workbook_path: Path, sheet_name: str) -> List[Plan]:
    """Return the plans listed on ``sheet_name``, in first-seen order.

    Raises :class:`FileNotFoundError` if the workbook cannot be located and
    :class:`ValueError` if the worksheet is missing.
    """

    workbook_path = Path(workbook_path)
    if not workbook_path.exists():
        raise FileNotFoundError(f"Workbook not found: {workbook_path}")

    workbook = load_workbook(filename=workbook_path, read_only=True, data_only=True)
    try:
        try:
            sheet = workbook[sheet_name]
        except KeyError as exc:
            raise ValueError(f"Worksheet '{sheet_name}' not found in workbook") from exc

        rows = sheet.iter_rows(values_only=True)
        headers_row = next(rows, None)
        if headers_row is None:  # Empty sheet
            return []

        headers = [
            str(header).strip() if header is not None else "" for header in headers_row
        ]
        header_index = {header: idx for idx, header in enumerate(headers)}

        def _value(row, column_name: str) -> str:
            idx = header_index.get(column_name)
            if idx is None or idx >= len(row) or row[idx] is None:
                return ""
            return str(row[idx])

        # Cell text per plan and section, one cell per line
        collected: Dict[str, Dict[str, List[str]]] = {}
        for row in rows:
            plan_name = _value(row, PLAN_COLUMN).strip()
            if not plan_name:
                continue  # Rows without a plan are ignored
            sections = collected.setdefault(
                plan_name, {key: [] for key in SECTION_KEYS}
            )
            for key in SECTION_KEYS:
                sections[key].append(_value(row, SECTION_TITLES[key]))
    finally:
        workbook.close()

    plans: List[Plan] = []
    for name, sections in collected.items():
        plan = build_plan(name, {key: "\n".join(cells) for key, cells in sections.items()})
        if plan is not None:
            plans.append(plan)
    logger.info("Read %d plans from sheet '%s'", len(plans), sheet_name)
    return plans


__all__ = ["build_plan", "extract_plans", "parse_names"]
