from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .rules import Severity


class IssueCategory(str, Enum):
    VALIDATION = "validation"
    TRANSFORMATION = "transformation"
    BUSINESS_RULE = "business_rule"


@dataclass(frozen=True)
class ValidationIssue:
    """One failed check on one cell. Used for errors, warnings and info alike."""

    row: int
    field: str
    value: Any
    rule: str
    severity: Severity
    message: str
    category: IssueCategory = IssueCategory.VALIDATION


class RowguardError(Exception):
    """Base class for engine errors."""


class ResultNotFoundError(RowguardError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"Validation result not found for job '{job_id}'")
        self.job_id = job_id


class ValidationRunError(RowguardError):
    """A run failed outside per-cell rule evaluation; no result was stored."""

    def __init__(self, job_id: str, reason: str) -> None:
        super().__init__(f"Validation failed for job '{job_id}': {reason}")
        self.job_id = job_id
        self.reason = reason
