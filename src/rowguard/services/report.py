from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Tuple

from ..domain.errors import ValidationIssue
from ..domain.results import PreviewRow, RunStatus, ValidationResult, ValidationSummary


HIGH_ERROR_RATE = 20.0
TOP_N = 3


@dataclass(frozen=True)
class ValidationReport:
    job_id: str
    generated_at: datetime
    status: RunStatus
    is_valid: bool
    total_rows: int
    processed_rows: int
    summary: ValidationSummary
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]
    recommendations: List[str]


@dataclass(frozen=True)
class PreviewPage:
    preview: List[PreviewRow]
    total_rows: int
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]


@dataclass(frozen=True)
class ErrorSummary:
    total_errors: int
    total_warnings: int
    errors_by_field: Dict[str, int]
    errors_by_rule: Dict[str, int]
    error_rate: float
    warning_rate: float
    top_errors: List[ValidationIssue]
    top_warnings: List[ValidationIssue]


def _top(counts: Mapping[str, int], n: int = TOP_N) -> List[Tuple[str, int]]:
    # sorted() is stable: equal counts keep first-seen order
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


def build_recommendations(result: ValidationResult) -> List[str]:
    recs: List[str] = []
    summary = result.summary

    if summary.error_rate > HIGH_ERROR_RATE:
        recs.append(
            "High error rate detected. Consider reviewing data source and validation rules."
        )

    for field, count in _top(summary.errors_by_field):
        recs.append(
            f"Field '{field}' has {count} errors. Consider data cleaning or rule adjustment."
        )

    for rule, count in _top(summary.errors_by_rule):
        recs.append(f"Validation rule '{rule}' triggered {count} times. Review rule configuration.")

    if not recs:
        recs.append("Data validation completed successfully with minimal issues.")
    return recs


def generate_report(job_id: str, result: ValidationResult) -> ValidationReport:
    return ValidationReport(
        job_id=job_id,
        generated_at=datetime.now(timezone.utc),
        status=result.status,
        is_valid=result.is_valid,
        total_rows=result.total_rows,
        processed_rows=result.processed_rows,
        summary=result.summary,
        errors=list(result.errors),
        warnings=list(result.warnings),
        recommendations=build_recommendations(result),
    )


def preview_page(result: ValidationResult, rows: int = 50, issue_limit: int = 100) -> PreviewPage:
    rows = max(0, min(rows, len(result.preview)))
    return PreviewPage(
        preview=result.preview[:rows],
        total_rows=result.total_rows,
        errors=result.errors[:issue_limit],
        warnings=result.warnings[:issue_limit],
    )


def error_summary(result: ValidationResult, severity: str = "all", top: int = 10) -> ErrorSummary:
    """Totals and leading issues, optionally restricted to 'error' or 'warning'."""
    if severity not in ("all", "error", "warning"):
        raise ValueError(f"severity must be 'all', 'error' or 'warning', got '{severity}'")
    with_errors = severity != "warning"
    with_warnings = severity != "error"
    errors = result.errors if with_errors else []
    warnings = result.warnings if with_warnings else []
    return ErrorSummary(
        total_errors=result.error_rows if with_errors else 0,
        total_warnings=result.warning_rows if with_warnings else 0,
        errors_by_field=dict(result.summary.errors_by_field),
        errors_by_rule=dict(result.summary.errors_by_rule),
        error_rate=result.summary.error_rate,
        warning_rate=result.summary.warning_rate,
        top_errors=errors[:top],
        top_warnings=warnings[:top],
    )
