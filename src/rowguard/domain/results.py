from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationIssue


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    EARLY_STOPPED = "early_stopped"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RowStatus:
    has_errors: bool = False
    has_warnings: bool = False
    error_count: int = 0
    warning_count: int = 0


@dataclass(frozen=True)
class PreviewRow:
    row: int
    data: Mapping[str, Any]
    validation: RowStatus


@dataclass
class ValidationSummary:
    errors_by_field: Dict[str, int] = field(default_factory=dict)
    errors_by_rule: Dict[str, int] = field(default_factory=dict)
    error_rate: float = 0.0
    warning_rate: float = 0.0
    rows_with_errors: int = 0
    rows_with_warnings: int = 0


@dataclass
class ValidationResult:
    """Outcome of one run, written batch by batch and stored once finalized.

    ``error_rows``/``warning_rows`` count issue entries, not distinct rows;
    the distinct counts live in ``summary.rows_with_errors`` and
    ``summary.rows_with_warnings``. Compare ``processed_rows`` to
    ``total_rows`` or read ``status`` to tell partial runs apart.
    """

    total_rows: int
    is_valid: bool = True
    processed_rows: int = 0
    error_rows: int = 0
    warning_rows: int = 0
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    info: List[ValidationIssue] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)
    preview: List[PreviewRow] = field(default_factory=list)
    status: RunStatus = RunStatus.RUNNING
    dropped_issues: int = 0


@dataclass
class ValidationProgress:
    job_id: str
    total_rows: int
    current_row: int = 0
    progress: int = 0
    errors_found: int = 0
    warnings_found: int = 0
    processing_rate: float = 0.0
    estimated_time_remaining: Optional[float] = None

    def snapshot(self) -> "ValidationProgress":
        return replace(self)
