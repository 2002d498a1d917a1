from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import yaml
from openpyxl import load_workbook

from rowguard.domain.errors import ValidationIssue
from rowguard.domain.results import PreviewRow, RowStatus, RunStatus, ValidationResult
from rowguard.domain.rules import Severity
from rowguard.services.output.report_writer import write_issues_workbook, write_report_yaml
from rowguard.services.report import generate_report


def sample_result() -> ValidationResult:
    err = ValidationIssue(
        row=2,
        field="email",
        value="bad",
        rule="Email Format",
        severity=Severity.ERROR,
        message="email must be a valid email address",
    )
    result = ValidationResult(total_rows=2, processed_rows=2, error_rows=1, is_valid=False)
    result.errors.append(err)
    result.summary.errors_by_field["email"] = 1
    result.summary.errors_by_rule["Email Format"] = 1
    result.summary.error_rate = 50.0
    result.preview.append(PreviewRow(row=1, data={"email": "a@b.co"}, validation=RowStatus()))
    result.preview.append(
        PreviewRow(
            row=2,
            data={"email": "bad"},
            validation=RowStatus(has_errors=True, error_count=1),
        )
    )
    result.status = RunStatus.COMPLETED
    return result


def test_write_report_yaml(tmp_path: Path) -> None:
    report = generate_report("job-1", sample_result())
    path = write_report_yaml(tmp_path, report, logging.getLogger("rowguard.test.output"))

    back = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert back["job_id"] == "job-1"
    assert back["status"] == "completed"
    assert back["summary"]["errors_by_field"] == {"email": 1}
    assert back["errors"][0]["severity"] == "error"
    assert back["errors"][0]["category"] == "validation"
    assert back["recommendations"]


def test_write_issues_workbook(tmp_path: Path) -> None:
    path = write_issues_workbook(tmp_path / "out" / "issues.xlsx", sample_result())

    errors = pd.read_excel(path, sheet_name="Errors")
    assert list(errors["Field"]) == ["email"]
    assert list(errors["Rule"]) == ["Email Format"]

    preview = pd.read_excel(path, sheet_name="Preview")
    assert list(preview["Row"]) == [1, 2]
    assert list(preview["Errors"]) == [0, 1]

    wb = load_workbook(path)
    assert wb.sheetnames == ["Errors", "Warnings", "Info", "Preview"]
    names = {t.displayName for ws in wb.worksheets for t in ws.tables.values()}
    # empty sheets get no table
    assert names == {"ErrorsTable", "PreviewTable"}


def test_preview_keeps_data_columns_named_like_annotations(tmp_path: Path) -> None:
    result = ValidationResult(total_rows=1, processed_rows=1, is_valid=True)
    result.preview.append(
        PreviewRow(row=1, data={"Row": "r-9", "Errors": "none"}, validation=RowStatus())
    )
    path = write_issues_workbook(tmp_path / "issues.xlsx", result)

    preview = pd.read_excel(path, sheet_name="Preview")
    assert list(preview.columns) == ["Row", "Row (data)", "Errors (data)", "Errors", "Warnings"]
    assert list(preview["Row"]) == [1]
    assert list(preview["Row (data)"]) == ["r-9"]
    assert list(preview["Errors"]) == [0]
