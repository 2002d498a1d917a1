from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from rich.logging import RichHandler


HUMAN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


@dataclass(frozen=True)
class LogFiles:
    human: Path
    jsonl: Path


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(record_extras(record))
        return json.dumps(payload, ensure_ascii=False, default=str)


class ExtraAwareFormatter(logging.Formatter):
    """Human format; with ``show_extras`` the structured fields are appended as k=v."""

    def __init__(self, fmt: str | None = None, show_extras: bool = False) -> None:
        super().__init__(fmt)
        self.show_extras = show_extras

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self.show_extras:
            return base
        extras = record_extras(record)
        if not extras:
            return base
        tail = " ".join(f"{k}={v}" for k, v in extras.items())
        return f"{base} [{tail}]"


def setup_logging(run_dir: Path, level: int = logging.INFO) -> LogFiles:
    run_dir.mkdir(parents=True, exist_ok=True)
    human_log = run_dir / "latest_run.log"
    jsonl_log = run_dir / "logs.jsonl"

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    human_handler = logging.FileHandler(human_log, encoding="utf-8")
    human_handler.setFormatter(ExtraAwareFormatter(HUMAN_FORMAT, show_extras=True))
    human_handler.setLevel(level)

    json_handler = logging.FileHandler(jsonl_log, encoding="utf-8")
    json_handler.setFormatter(JsonLineFormatter())
    json_handler.setLevel(level)

    console = RichHandler(
        level=level,
        markup=False,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    # RichHandler renders time and level itself
    console.setFormatter(ExtraAwareFormatter("%(message)s"))

    root.addHandler(human_handler)
    root.addHandler(json_handler)
    root.addHandler(console)
    return LogFiles(human=human_log, jsonl=jsonl_log)
