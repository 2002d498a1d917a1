from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from ..domain.cancellation import CancellationToken
from ..domain.errors import ValidationIssue, ValidationRunError
from ..domain.options import ValidationOptions, merge_options
from ..domain.results import (
    PreviewRow,
    RowStatus,
    RunStatus,
    ValidationProgress,
    ValidationResult,
)
from ..domain.rules import Severity, ValidationRule
from .job_progress import ProgressNotifier
from .store import ProgressStore, ResultStore, StatusStore
from .validation.default_rules import resolve_rules
from .validation.field_validator import FieldValidator, order_for_evaluation


Rows = Union[Sequence[Mapping[str, Any]], pd.DataFrame]


def _as_records(rows: Rows) -> List[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return list(rows)


def _rules_by_field(rules: Sequence[ValidationRule]) -> Dict[str, List[ValidationRule]]:
    grouped: Dict[str, List[ValidationRule]] = defaultdict(list)
    for rule in rules:
        if rule.is_active:
            grouped[rule.field].append(rule)
    return {f: order_for_evaluation(rs) for f, rs in grouped.items()}


class _RunState:
    """Mutable bookkeeping for one run; only the batch loop touches it."""

    def __init__(
        self, result: ValidationResult, progress: ValidationProgress, cap: Optional[int]
    ) -> None:
        self.result = result
        self.progress = progress
        self.cap = cap
        self.row_status: Dict[int, RowStatus] = {}

    def record(self, issue: ValidationIssue) -> None:
        result, progress = self.result, self.progress
        if issue.severity == Severity.ERROR:
            progress.errors_found += 1
            self._append(result.errors, issue)
            status = self.row_status.setdefault(issue.row, RowStatus())
            if not status.has_errors:
                result.summary.rows_with_errors += 1
            status.has_errors = True
            status.error_count += 1
        elif issue.severity == Severity.WARNING:
            progress.warnings_found += 1
            self._append(result.warnings, issue)
            status = self.row_status.setdefault(issue.row, RowStatus())
            if not status.has_warnings:
                result.summary.rows_with_warnings += 1
            status.has_warnings = True
            status.warning_count += 1
        else:
            self._append(result.info, issue)
            return

        summary = result.summary
        summary.errors_by_field[issue.field] = summary.errors_by_field.get(issue.field, 0) + 1
        summary.errors_by_rule[issue.rule] = summary.errors_by_rule.get(issue.rule, 0) + 1

    def _append(self, bucket: List[ValidationIssue], issue: ValidationIssue) -> None:
        if self.cap is not None and len(bucket) >= self.cap:
            self.result.dropped_issues += 1
            return
        bucket.append(issue)

    def status_for(self, row: int) -> RowStatus:
        status = self.row_status.get(row)
        if status is None:
            return RowStatus()
        return RowStatus(
            has_errors=status.has_errors,
            has_warnings=status.has_warnings,
            error_count=status.error_count,
            warning_count=status.warning_count,
        )


class BatchProcessor:
    """Validates a row set in fixed-size batches on the running event loop.

    Progress lives in ``progress_store`` while the run is active and is
    removed when it ends, whatever the outcome. The finished result is put in
    ``result_store`` unless the run failed.
    """

    def __init__(
        self,
        validator: FieldValidator,
        progress_store: ProgressStore,
        result_store: ResultStore,
        status_store: StatusStore,
        notifier: ProgressNotifier,
        logger: logging.Logger,
        clock: Callable[[], float] = time.monotonic,
        yield_delay: float = 0.0,
    ) -> None:
        self.validator = validator
        self.progress_store = progress_store
        self.result_store = result_store
        self.status_store = status_store
        self.notifier = notifier
        self.logger = logger
        self.clock = clock
        self.yield_delay = yield_delay

    async def run(
        self,
        job_id: str,
        rows: Rows,
        headers: Optional[Sequence[str]] = None,
        options: Union[ValidationOptions, Mapping[str, Any], None] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ValidationResult:
        records = _as_records(rows)
        if headers is None:
            headers = [str(c) for c in rows.columns] if isinstance(rows, pd.DataFrame) else []
        total = len(records)

        progress = ValidationProgress(job_id=job_id, total_rows=total)
        self.progress_store.put(job_id, progress)
        self.status_store.put(job_id, RunStatus.RUNNING)
        started = self.clock()

        try:
            opts = merge_options(options)
            rules = resolve_rules(headers, opts.validation_rules)
            self.logger.info(
                f"Starting validation for job {job_id}",
                extra={
                    "job_id": job_id,
                    "total_rows": total,
                    "headers": len(headers),
                    "rules": len(rules),
                    "batch_size": opts.batch_size,
                },
            )
            result = ValidationResult(total_rows=total)
            state = _RunState(result, progress, opts.max_retained_issues)
            status = await self._process(
                job_id, records, _rules_by_field(rules), opts, state, started, cancel_token
            )
            self._finalize(state, status)
            self.result_store.put(job_id, result)
            self.status_store.put(job_id, status)
        except asyncio.CancelledError:
            self.status_store.put(job_id, RunStatus.FAILED)
            self.logger.warning(
                f"Validation task for job {job_id} was cancelled", extra={"job_id": job_id}
            )
            raise
        except Exception as exc:
            self.status_store.put(job_id, RunStatus.FAILED)
            self.logger.error(
                f"Validation failed for job {job_id}: {exc}",
                exc_info=True,
                extra={"job_id": job_id},
            )
            raise ValidationRunError(job_id, str(exc)) from exc
        finally:
            self.progress_store.pop(job_id)

        self.logger.info(
            f"Validation {status.value} for job {job_id}",
            extra={
                "job_id": job_id,
                "total_rows": result.total_rows,
                "processed_rows": result.processed_rows,
                "error_rows": result.error_rows,
                "warning_rows": result.warning_rows,
                "error_rate": round(result.summary.error_rate, 2),
                "elapsed_seconds": round(self.clock() - started, 3),
            },
        )
        return result

    async def _process(
        self,
        job_id: str,
        records: List[Mapping[str, Any]],
        rules_by_field: Mapping[str, List[ValidationRule]],
        opts: ValidationOptions,
        state: _RunState,
        started: float,
        cancel_token: Optional[CancellationToken],
    ) -> RunStatus:
        progress, result = state.progress, state.result
        total = progress.total_rows

        for start in range(0, total, opts.batch_size):
            if cancel_token is not None and cancel_token.cancelled:
                self.logger.warning(
                    f"Validation cancelled for job {job_id} at row {progress.current_row}",
                    extra={"job_id": job_id, "reason": cancel_token.reason},
                )
                return RunStatus.CANCELLED

            batch = records[start : start + opts.batch_size]
            for offset, row in enumerate(batch):
                row_index = start + offset + 1
                for field, value in row.items():
                    field_rules = rules_by_field.get(field)
                    if not field_rules:
                        continue
                    issues = self.validator.validate_field(value, field, row_index, field_rules)
                    for issue in issues:
                        state.record(issue)

            progress.current_row = start + len(batch)
            progress.progress = math.floor(progress.current_row / total * 100 + 0.5)
            elapsed = self.clock() - started
            progress.processing_rate = progress.current_row / elapsed if elapsed > 0 else 0.0
            remaining = total - progress.current_row
            if progress.processing_rate > 0:
                progress.estimated_time_remaining = remaining / progress.processing_rate
            elif remaining == 0:
                progress.estimated_time_remaining = 0.0

            error_rate = progress.errors_found / progress.current_row * 100
            if error_rate > opts.stop_on_error_threshold:
                self.logger.warning(
                    f"Validation stopped for job {job_id}: error rate ({error_rate:.2f}%) "
                    f"exceeds threshold ({opts.stop_on_error_threshold}%)",
                    extra={"job_id": job_id, "current_row": progress.current_row},
                )
                return RunStatus.EARLY_STOPPED

            if opts.enable_real_time_updates:
                self.notifier.notify(
                    job_id,
                    {
                        "progress": progress.progress,
                        "records_processed": progress.current_row,
                        "estimated_time_remaining": progress.estimated_time_remaining,
                    },
                )

            room = opts.max_preview_rows - len(result.preview)
            if room > 0:
                for offset, row in enumerate(batch[:room]):
                    row_index = start + offset + 1
                    result.preview.append(
                        PreviewRow(
                            row=row_index,
                            data=dict(row),
                            validation=state.status_for(row_index),
                        )
                    )

            await asyncio.sleep(self.yield_delay)

        return RunStatus.COMPLETED

    def _finalize(self, state: _RunState, status: RunStatus) -> None:
        result, progress = state.result, state.progress
        result.processed_rows = progress.current_row
        result.error_rows = progress.errors_found
        result.warning_rows = progress.warnings_found
        result.is_valid = progress.errors_found == 0
        if result.total_rows > 0:
            result.summary.error_rate = result.error_rows / result.total_rows * 100
            result.summary.warning_rate = result.warning_rows / result.total_rows * 100
        result.status = status
