from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Sequence

from plan_comparator.model import (
    SECTION_KEYS,
    SECTION_TITLES,
    PlanComparison,
    SectionComparison,
    SideLabels,
)

logger = logging.getLogger(__name__)

REPORT_TITLE = "Plan Comparator Report"
NO_PLANS_MESSAGE = "No plans to compare."


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _format_list(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "None"


def build_text_report(
    results: Sequence[PlanComparison],
    generated_at: str,
    labels: SideLabels = SideLabels(),
) -> str:
    """Render comparison results as plain text.

    ``generated_at`` is written verbatim after ``Generated:`` so identical
    input always yields identical output.
    """

    lines = [REPORT_TITLE, f"Generated: {generated_at}", ""]
    if not results:
        lines.append(NO_PLANS_MESSAGE)
        return "\n".join(lines)

    for plan in results:
        lines.append(f"=== Plan: {plan.plan_name} ===")
        for key in SECTION_KEYS:
            section = plan.sections.get(key, SectionComparison())
            lines.append(f"- {SECTION_TITLES[key]}: {section.status}")
            lines.append(f"  In Both: {_format_list(section.in_both)}")
            lines.append(f"  {labels.only_left}: {_format_list(section.only_left)}")
            lines.append(f"  {labels.only_right}: {_format_list(section.only_right)}")
        lines.append("")
    return "\n".join(lines)


def write_text_report(
    results: Sequence[PlanComparison],
    output_path: Path,
    generated_at: str | None = None,
    labels: SideLabels = SideLabels(),
) -> Path:
    text = build_text_report(results, generated_at or iso_timestamp(), labels)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("Text report written to %s", output_path)
    return output_path


def _serialise_section(section: SectionComparison) -> Dict[str, Any]:
    return {
        "status": section.status,
        "exact_same": section.exact_same,
        "in_both": list(section.in_both),
        "only_left": list(section.only_left),
        "only_right": list(section.only_right),
    }


def build_report_payload(
    results: Sequence[PlanComparison],
    generated_at: str,
    labels: SideLabels = SideLabels(),
) -> Dict[str, Any]:
    """Build a JSON-ready payload mirroring the text report."""

    return {
        "title": REPORT_TITLE,
        "timestamp": generated_at,
        "sources": {"left": labels.left, "right": labels.right},
        "plans": [
            {
                "plan_name": plan.plan_name,
                "sections": {
                    key: _serialise_section(
                        plan.sections.get(key, SectionComparison())
                    )
                    for key in SECTION_KEYS
                },
            }
            for plan in results
        ],
    }


def write_report_to_json(
    results: Sequence[PlanComparison],
    output_path: Path,
    generated_at: str | None = None,
    labels: SideLabels = SideLabels(),
) -> Path:
    payload = build_report_payload(results, generated_at or iso_timestamp(), labels)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info("JSON report written to %s", output_path)
    return output_path


__all__ = [
    "build_report_payload",
    "build_text_report",
    "iso_timestamp",
    "write_report_to_json",
    "write_text_report",
]
