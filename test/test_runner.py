import json
from datetime import date
from pathlib import Path
from unittest.mock import Mock

import pytest
from openpyxl import Workbook, load_workbook

from plan_comparator import cli
from plan_comparator.config import AuditConfig, ConfigurationError
from plan_comparator.excel_writer import (
    EXPORT_FAILURE_MESSAGE,
    ExportUnavailableError,
    OpenpyxlSerializer,
)
from plan_comparator.model import Plan, SideLabels
from plan_comparator.runner import AuditSession, run_plan_audit


def write_input_workbook(path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "OneKonnect"
    ws.append(["Plan", "Reconciled"])
    ws.append(["Dental", "Alice"])
    ws.append(["Dental", "Bob"])
    right = wb.create_sheet("Puzzle")
    right.append(["Plan", "Reconciled"])
    right.append(["Dental", "alice"])
    right.append(["Vision", "Carol"])
    wb.save(path)
    return path


# --------------------------------------------------------------------
# SESSION
# --------------------------------------------------------------------
def test_session_keeps_results_after_failed_export(tmp_path):
    session = AuditSession(SideLabels("Ledger", "Bank"))
    results = session.compare(
        [Plan(name="Dental", sections={"reconciled": ("Ann",)})], []
    )

    broken = Mock()
    broken.ensure_available.side_effect = ExportUnavailableError("offline")
    with pytest.raises(ExportUnavailableError):
        session.export_workbook(broken, tmp_path)

    assert session.results == results

    # Retry with a working serializer, no new comparison needed
    path = session.export_workbook(
        OpenpyxlSerializer(), tmp_path, project_name="Acme", today=date(2025, 5, 6)
    )
    sheet = load_workbook(path)["Dental"]
    assert sheet["A2"].value == "Ann"
    assert sheet["B2"].value == "Only Ledger"


def test_session_text_report():
    session = AuditSession()
    assert session.text_report("T").endswith("No plans to compare.")

    session.compare([Plan(name="Dental")], [Plan(name="Dental")])
    assert "=== Plan: Dental ===" in session.text_report("T")


def test_sessions_are_independent():
    first = AuditSession()
    second = AuditSession()
    first.compare([Plan(name="Dental")], [])
    assert second.results == []


# --------------------------------------------------------------------
# RUNNER
# --------------------------------------------------------------------
def test_run_plan_audit(tmp_path):
    workbook = write_input_workbook(tmp_path / "input.xlsx")
    config = AuditConfig(output_dir=tmp_path / "out", project_name="Acme Corp")

    outcome = run_plan_audit(workbook, config=config, today=date(2025, 1, 2))

    assert outcome.export_error is None
    assert [r.plan_name for r in outcome.results] == ["Dental", "Vision"]
    text = outcome.report_path.read_text(encoding="utf-8")
    assert "  In Both: Alice" in text
    assert "  Only OneKonnect: Bob" in text
    assert "  Only Puzzle: Carol" in text

    payload = json.loads(outcome.json_path.read_text(encoding="utf-8"))
    assert [p["plan_name"] for p in payload["plans"]] == ["Dental", "Vision"]

    assert outcome.workbook_path == tmp_path / "out" / "Acme-Corp_Audit_2025-01-02.xlsx"
    assert load_workbook(outcome.workbook_path).sheetnames == ["Dental", "Vision"]


def test_run_plan_audit_export_unavailable(tmp_path):
    workbook = write_input_workbook(tmp_path / "input.xlsx")
    config = AuditConfig(output_dir=tmp_path / "out")

    outcome = run_plan_audit(
        workbook,
        config=config,
        serializer=OpenpyxlSerializer(module_name="not_a_real_spreadsheet_lib"),
    )

    assert outcome.workbook_path is None
    assert outcome.export_error == EXPORT_FAILURE_MESSAGE
    assert outcome.report_path.exists()
    assert len(outcome.results) == 2


def test_run_plan_audit_missing_sheet(tmp_path):
    workbook = write_input_workbook(tmp_path / "input.xlsx")
    with pytest.raises(ValueError):
        run_plan_audit(
            workbook, left_sheet="Nope", config=AuditConfig(output_dir=tmp_path)
        )


# --------------------------------------------------------------------
# CONFIG
# --------------------------------------------------------------------
def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("PLAN_AUDIT_LEFT_LABEL", "Ledger")
    monkeypatch.setenv("PLAN_AUDIT_RIGHT_LABEL", "  ")
    monkeypatch.setenv("PLAN_AUDIT_OUTPUT_DIR", "exports")
    monkeypatch.delenv("PLAN_AUDIT_PROJECT_NAME", raising=False)

    config = AuditConfig.from_environment()

    assert config.left_label == "Ledger"
    assert config.right_label == "Puzzle"
    assert config.output_dir == Path("exports")
    assert config.project_name is None


def test_config_rejects_blank_label():
    with pytest.raises(ConfigurationError):
        AuditConfig(left_label=" ")


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def test_cli_main(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("PLAN_AUDIT_PROJECT_NAME", raising=False)
    workbook = write_input_workbook(tmp_path / "input.xlsx")

    exit_code = cli.main(
        [
            "--workbook",
            str(workbook),
            "--output-dir",
            str(tmp_path / "out"),
            "--right-label",
            "Bank",
        ]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Report written to" in out
    assert "Workbook written to" in out
    report = (tmp_path / "out" / "plan_report.txt").read_text(encoding="utf-8")
    assert "  Only Bank: Carol" in report


def test_cli_missing_workbook(tmp_path, capsys):
    exit_code = cli.main(["--workbook", str(tmp_path / "missing.xlsx")])

    assert exit_code == 2
    assert "Workbook not found" in capsys.readouterr().err


def test_cli_export_failure(tmp_path, capsys, monkeypatch):
    workbook = write_input_workbook(tmp_path / "input.xlsx")
    monkeypatch.setattr(
        "plan_comparator.runner.OpenpyxlSerializer",
        lambda: OpenpyxlSerializer(module_name="not_a_real_spreadsheet_lib"),
    )

    exit_code = cli.main(
        ["--workbook", str(workbook), "--output-dir", str(tmp_path / "out")]
    )

    assert exit_code == 1
    assert EXPORT_FAILURE_MESSAGE in capsys.readouterr().err


@pytest.mark.parametrize("file_name", ["not_a_workbook.xlsx", "notes.txt"])
def test_cli_rejects_non_workbook_input(tmp_path, capsys, file_name):
    bogus = tmp_path / file_name
    bogus.write_text("just some text", encoding="utf-8")

    exit_code = cli.main(["--workbook", str(bogus), "--output-dir", str(tmp_path / "out")])

    assert exit_code == 2
    assert "Error:" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()
