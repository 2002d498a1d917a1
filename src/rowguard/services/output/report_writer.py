from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd
import yaml
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from ...domain.errors import ValidationIssue
from ...domain.results import ValidationResult
from ..report import ValidationReport


ISSUE_COLUMNS: List[str] = ["Row", "Field", "Value", "Rule", "Severity", "Message", "Category"]


def _plain(value: Any) -> Any:
    """Make a value safe for yaml.safe_dump (enums, numpy scalars, timestamps)."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return str(value)


def report_to_dict(report: ValidationReport) -> Dict[str, Any]:
    return {
        "job_id": report.job_id,
        "generated_at": report.generated_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "status": report.status.value,
        "is_valid": report.is_valid,
        "total_rows": report.total_rows,
        "processed_rows": report.processed_rows,
        "summary": _plain(asdict(report.summary)),
        "recommendations": list(report.recommendations),
        "errors": [_plain(asdict(e)) for e in report.errors],
        "warnings": [_plain(asdict(w)) for w in report.warnings],
    }


def write_report_yaml(run_dir: Path, report: ValidationReport, logger: logging.Logger) -> Path:
    out_path = run_dir / "validation_report.yaml"
    logger.info("Writing validation_report.yaml", extra={"path": str(out_path)})
    with out_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(report_to_dict(report), f, sort_keys=False, allow_unicode=True)
    return out_path


def _issues_frame(issues: Sequence[ValidationIssue]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Row": i.row,
                "Field": i.field,
                "Value": "" if i.value is None else str(i.value),
                "Rule": i.rule,
                "Severity": i.severity.value,
                "Message": i.message,
                "Category": i.category.value,
            }
            for i in issues
        ],
        columns=ISSUE_COLUMNS,
    )


PREVIEW_ANNOTATIONS = frozenset({"Row", "Errors", "Warnings"})


def _data_column(name: Any) -> str:
    # data headers never replace the annotation columns
    text = str(name)
    return f"{text} (data)" if text in PREVIEW_ANNOTATIONS else text


def _preview_frame(result: ValidationResult) -> pd.DataFrame:
    records = []
    for p in result.preview:
        rec: Dict[str, Any] = {"Row": p.row}
        rec.update({_data_column(k): v for k, v in p.data.items()})
        rec["Errors"] = p.validation.error_count
        rec["Warnings"] = p.validation.warning_count
        records.append(rec)
    return pd.DataFrame(records)


def _style_as_table(ws: Any, df: pd.DataFrame, display_name: str) -> None:
    if df.empty or len(df.columns) == 0:
        return
    last_col = get_column_letter(len(df.columns))
    table = Table(displayName=display_name, ref=f"A1:{last_col}{len(df) + 1}")
    table.tableStyleInfo = TableStyleInfo(
        name="TableStyleMedium2",
        showFirstColumn=False,
        showLastColumn=False,
        showRowStripes=True,
        showColumnStripes=False,
    )
    ws.add_table(table)

    for idx, header in enumerate(df.columns, start=1):
        col = get_column_letter(idx)
        ws.column_dimensions[col].width = max(12, min(60, len(str(header)) + 2))
        cell = ws.cell(row=1, column=idx)
        cell.alignment = Alignment(horizontal="left")
        cell.font = Font(color="FFFFFFFF")


def write_issues_workbook(path: Path, result: ValidationResult) -> Path:
    """Write Errors, Warnings, Info and Preview sheets as Excel tables."""
    path.parent.mkdir(parents=True, exist_ok=True)
    sheets = {
        "Errors": _issues_frame(result.errors),
        "Warnings": _issues_frame(result.warnings),
        "Info": _issues_frame(result.info),
        "Preview": _preview_frame(result),
    }
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
            _style_as_table(writer.sheets[name], df, f"{name}Table")
    return path
