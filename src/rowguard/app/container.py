from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import Config
from ..services.io_tabular import IOService
from ..services.job_progress import JobProgressSink, LoggingProgressSink
from ..services.validate_service import ValidationService


@dataclass(frozen=True)
class Container:
    cfg: Config
    io: IOService
    validation: ValidationService


def build_container(
    base_logger_name: str, cfg: Config, sink: Optional[JobProgressSink] = None
) -> Container:
    base = logging.getLogger(base_logger_name)
    io = IOService(base.getChild("io"))
    validation = ValidationService(
        base.getChild("validation"),
        sink=sink or LoggingProgressSink(base.getChild("jobs")),
    )
    return Container(cfg=cfg, io=io, validation=validation)
