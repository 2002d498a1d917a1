from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from ..domain.cancellation import CancellationToken
from ..domain.errors import ResultNotFoundError
from ..domain.options import ValidationOptions
from ..domain.results import RunStatus, ValidationProgress, ValidationResult
from .batch_processor import BatchProcessor, Rows
from .job_progress import JobProgressSink, NullProgressSink, ProgressNotifier
from .report import (
    ErrorSummary,
    PreviewPage,
    ValidationReport,
    error_summary,
    generate_report,
    preview_page,
)
from .store import InMemoryStore, ProgressStore, ResultStore, StatusStore
from .validation.field_validator import CustomCheck, FieldValidator


class ValidationService:
    """Entry point for validation runs and the pull accessors pollers use.

    Runs for different job ids may interleave on one event loop. Runs for the
    same job id must not overlap; they would share one progress/result slot.
    """

    def __init__(
        self,
        logger: logging.Logger,
        sink: Optional[JobProgressSink] = None,
        progress_store: Optional[ProgressStore] = None,
        result_store: Optional[ResultStore] = None,
        status_store: Optional[StatusStore] = None,
        custom_checks: Optional[Mapping[str, CustomCheck]] = None,
    ) -> None:
        self.logger = logger
        self.progress_store: ProgressStore = progress_store or InMemoryStore()
        self.result_store: ResultStore = result_store or InMemoryStore()
        self.status_store: StatusStore = status_store or InMemoryStore()
        self.notifier = ProgressNotifier(sink or NullProgressSink(), logger.getChild("progress"))
        self.processor = BatchProcessor(
            validator=FieldValidator(logger.getChild("rules"), custom_checks),
            progress_store=self.progress_store,
            result_store=self.result_store,
            status_store=self.status_store,
            notifier=self.notifier,
            logger=logger,
        )

    async def run(
        self,
        job_id: str,
        rows: Rows,
        headers: Optional[Sequence[str]] = None,
        options: Union[ValidationOptions, Mapping[str, Any], None] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ValidationResult:
        return await self.processor.run(job_id, rows, headers, options, cancel_token)

    async def drain(self) -> None:
        """Wait for outstanding progress notifications."""
        await self.notifier.drain()

    def get_progress(self, job_id: str) -> Optional[ValidationProgress]:
        progress = self.progress_store.get(job_id)
        return progress.snapshot() if progress is not None else None

    def get_result(self, job_id: str) -> Optional[ValidationResult]:
        return self.result_store.get(job_id)

    def get_status(self, job_id: str) -> Optional[RunStatus]:
        return self.status_store.get(job_id)

    def _require_result(self, job_id: str) -> ValidationResult:
        result = self.result_store.get(job_id)
        if result is None:
            raise ResultNotFoundError(job_id)
        return result

    def generate_report(self, job_id: str) -> ValidationReport:
        report = generate_report(job_id, self._require_result(job_id))
        self.logger.info(
            f"Generated validation report for job {job_id}",
            extra={"job_id": job_id, "recommendations": len(report.recommendations)},
        )
        return report

    def get_preview(self, job_id: str, rows: int = 50) -> PreviewPage:
        return preview_page(self._require_result(job_id), rows=rows)

    def get_error_summary(self, job_id: str, severity: str = "all") -> ErrorSummary:
        return error_summary(self._require_result(job_id), severity=severity)

    def clear(self, job_id: str) -> None:
        """Forget the stored result. An active run keeps its progress entry."""
        self.result_store.pop(job_id)
        if self.status_store.get(job_id) != RunStatus.RUNNING:
            self.status_store.pop(job_id)
