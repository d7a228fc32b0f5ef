"""Command-line interface for the plan comparator."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from zipfile import BadZipFile

from openpyxl.utils.exceptions import InvalidFileException

from .config import AuditConfig, ConfigurationError
from .logging_config import configure_logging
from .runner import DEFAULT_LEFT_SHEET, DEFAULT_RIGHT_SHEET, run_plan_audit


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare plan rosters between two sources"
    )
    parser.add_argument(
        "--workbook",
        required=True,
        help="Excel workbook holding one worksheet per source",
    )
    parser.add_argument(
        "--left-sheet", default=DEFAULT_LEFT_SHEET, help="Worksheet of the left source"
    )
    parser.add_argument(
        "--right-sheet",
        default=DEFAULT_RIGHT_SHEET,
        help="Worksheet of the right source",
    )
    parser.add_argument("--output-dir", help="Directory for the generated reports")
    parser.add_argument("--project-name", help="Project name used in the file name")
    parser.add_argument("--left-label", help="Display name of the left source")
    parser.add_argument("--right-label", help="Display name of the right source")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    overrides = {
        "left_label": args.left_label,
        "right_label": args.right_label,
        "output_dir": Path(args.output_dir) if args.output_dir else None,
        "project_name": args.project_name,
    }
    try:
        config = dataclasses.replace(
            AuditConfig.from_environment(),
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        outcome = run_plan_audit(
            args.workbook,
            left_sheet=args.left_sheet,
            right_sheet=args.right_sheet,
            config=config,
        )
    except (FileNotFoundError, ValueError, InvalidFileException, BadZipFile) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"Report written to {outcome.report_path}")
    if outcome.export_error:
        print(outcome.export_error, file=sys.stderr)
        return 1
    print(f"Workbook written to {outcome.workbook_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
