from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..utils.logging_setup import LogFiles, setup_logging


@dataclass(frozen=True)
class RunContext:
    job_id: str
    run_dir: Path
    logs: LogFiles
    logger: logging.Logger


def _safe_dir_name(job_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", job_id).strip("_") or "job"


def start_run(out_dir: Path, job_id: str, base_logger_name: str = "rowguard") -> RunContext:
    """Create ``<out>/<job>_<utc timestamp>/`` and route logging into it."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    run_dir = out_dir / f"{_safe_dir_name(job_id)}_{stamp}"
    logs = setup_logging(run_dir)
    logger = logging.getLogger(base_logger_name)
    logger.info("Run started", extra={"run_dir": str(run_dir), "job_id": job_id})
    return RunContext(job_id=job_id, run_dir=run_dir, logs=logs, logger=logger)
