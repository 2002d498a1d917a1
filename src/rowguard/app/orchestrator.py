from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List

from ..config import Config
from ..domain.results import RunStatus, ValidationResult
from ..domain.rules import ValidationRule
from ..services.io_tabular import TabularData
from ..services.output.report_writer import write_issues_workbook, write_report_yaml
from ..services.validation.rule_file import load_rules
from ..types import ProgressEvent
from .container import Container
from .progress_monitor import monitor_progress
from .run_manager import start_run


EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_PARTIAL = 2
EXIT_FAILED = 3


@dataclass(frozen=True)
class Orchestrator:
    container: Container
    cfg: Config
    logger: logging.Logger

    def run(
        self,
        input_path: Path,
        rules_path: Path | None,
        out_dir: Path,
        job_id: str | None = None,
    ) -> int:
        """Read the input, validate it, write the report and issue workbook.

        Exit codes: 0 valid, 1 invalid, 2 stopped early or cancelled, 3 failed.
        """
        job = job_id or input_path.stem
        run_ctx = start_run(out_dir, job)

        try:
            data = self.container.io.read_table(input_path)
            rules: List[ValidationRule] = []
            if rules_path is not None:
                rules = load_rules(rules_path)
                self.logger.info(f"Loaded {len(rules)} rules", extra={"path": str(rules_path)})

            result = asyncio.run(self._validate(job, data, rules))

            service = self.container.validation
            report = service.generate_report(job)
            write_report_yaml(run_ctx.run_dir, report, self.logger)
            issues_path = write_issues_workbook(run_ctx.run_dir / "validation_issues.xlsx", result)
            self.logger.info(f"Wrote {issues_path.name}", extra={"path": str(issues_path)})

            self._log_outcome(result, report.recommendations)
            if result.status in (RunStatus.EARLY_STOPPED, RunStatus.CANCELLED):
                return EXIT_PARTIAL
            return EXIT_VALID if result.is_valid else EXIT_INVALID

        except Exception as e:
            self.logger.error(f"Validation run failed: {e}", exc_info=True)
            return EXIT_FAILED

    async def _validate(
        self, job_id: str, data: TabularData, rules: List[ValidationRule]
    ) -> ValidationResult:
        service = self.container.validation
        options = self.cfg.to_options()
        if rules:
            options = replace(options, validation_rules=tuple(rules))

        task = asyncio.ensure_future(service.run(job_id, data.rows, data.headers, options))
        await monitor_progress(
            service, job_id, task, self._on_event, interval=self.cfg.poll_interval
        )
        try:
            return await task
        finally:
            await service.drain()

    def _on_event(self, event: ProgressEvent) -> None:
        data = event["data"]
        kind = event["kind"]
        if kind == "progress":
            eta = data.get("estimated_time_remaining")
            eta_txt = f", ~{eta:.1f}s left" if eta is not None else ""
            self.logger.info(
                f"Progress {data['progress']}% ({data['current_row']}/{data['total_rows']} rows, "
                f"{data['errors_found']} errors{eta_txt})"
            )
        elif kind == "error":
            self.logger.error(f"Validation error: {data.get('error')}")
        else:
            self.logger.info(f"Validation {kind}", extra={"job_id": event["job_id"], **data})

    def _log_outcome(self, result: ValidationResult, recommendations: List[str]) -> None:
        self.logger.info(
            f"Processed {result.processed_rows}/{result.total_rows} rows: "
            f"{result.error_rows} errors, {result.warning_rows} warnings ({result.status.value})"
        )
        shown = result.errors[: self.cfg.max_errors]
        if shown:
            self.logger.warning(f"First {len(shown)} errors:")
            for issue in shown:
                self.logger.warning(f"  Row {issue.row} [{issue.field}]: {issue.message}")
        for rec in recommendations:
            self.logger.info(f"Recommendation: {rec}")
