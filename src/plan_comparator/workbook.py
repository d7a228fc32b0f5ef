"""Workbook model builder.

Turns comparison results into one sheet per plan. Each section gets a name
column and a result column; the entry lists of the four sections are padded
independently, so a row only pairs up entries by position.
"""

from __future__ import annotations

import re
from typing import Sequence

from plan_comparator.model import (
    SECTION_TITLES,
    PlanComparison,
    SectionComparison,
    Sheet,
    SideLabels,
    Workbook,
)
from plan_comparator.report import NO_PLANS_MESSAGE, REPORT_TITLE, iso_timestamp

MAX_SHEET_NAME = 31  # Excel limit
DEFAULT_SHEET_NAME = "Plan"
SUMMARY_SHEET_NAME = "Summary"

# Column order of the sheet, independent of the report's section order
SHEET_SECTION_ORDER = ("reconciled", "unreconciled", "customerOnly", "invoiceOnly")
HEADER_ROW = [
    cell for key in SHEET_SECTION_ORDER for cell in (SECTION_TITLES[key], "Result")
]

_ILLEGAL_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")


def make_sheet_name(plan_name: str | None, used_names: set[str]) -> str:
    """Return a unique, Excel-safe sheet name and record it in ``used_names``."""

    cleaned = _ILLEGAL_SHEET_CHARS.sub("", plan_name or "").strip()
    cleaned = cleaned[:MAX_SHEET_NAME] or DEFAULT_SHEET_NAME

    # Excel compares sheet names case-insensitively
    taken = {name.casefold() for name in used_names}
    candidate = cleaned
    counter = 1
    while candidate.casefold() in taken:
        suffix = f" ({counter})"
        candidate = cleaned[: MAX_SHEET_NAME - len(suffix)] + suffix
        counter += 1
    used_names.add(candidate)
    return candidate


def _section_entries(
    section: SectionComparison, labels: SideLabels
) -> list[tuple[str, str]]:
    entries = [(name, "In Both") for name in section.in_both]
    entries.extend((name, labels.only_left) for name in section.only_left)
    entries.extend((name, labels.only_right) for name in section.only_right)
    return entries


def _plan_grid(plan: PlanComparison, labels: SideLabels) -> list[list[str]]:
    columns = [
        _section_entries(plan.sections.get(key, SectionComparison()), labels)
        for key in SHEET_SECTION_ORDER
    ]
    row_count = max(1, *(len(entries) for entries in columns))

    grid = [list(HEADER_ROW)]
    for i in range(row_count):
        row: list[str] = []
        for entries in columns:
            name, result = entries[i] if i < len(entries) else ("", "")
            row.extend((name, result))
        grid.append(row)
    return grid


def build_workbook(
    results: Sequence[PlanComparison],
    labels: SideLabels = SideLabels(),
    generated_at: str | None = None,
) -> Workbook:
    """Build the sheet-per-plan workbook model, in ``results`` order."""

    if not results:
        return [
            Sheet(
                name=SUMMARY_SHEET_NAME,
                grid=[
                    [REPORT_TITLE],
                    [f"Generated: {generated_at or iso_timestamp()}"],
                    [],
                    [NO_PLANS_MESSAGE],
                ],
            )
        ]

    used_names: set[str] = set()
    return [
        Sheet(name=make_sheet_name(plan.plan_name, used_names), grid=_plan_grid(plan, labels))
        for plan in results
    ]


__all__ = ["HEADER_ROW", "build_workbook", "make_sheet_name"]
