from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any, Callable, Optional

from ..domain.results import ValidationProgress
from ..services.validate_service import ValidationService
from ..types import ProgressEvent


EventListener = Callable[[ProgressEvent], None]


def _event(kind: str, job_id: str, **data: Any) -> ProgressEvent:
    return {"kind": kind, "job_id": job_id, "data": data}


async def monitor_progress(
    service: ValidationService,
    job_id: str,
    task: "asyncio.Future[Any]",
    on_event: EventListener,
    interval: float = 1.0,
) -> None:
    """Poll ``service`` while ``task`` runs and translate what it sees into events.

    Emits ``started`` once, ``progress`` for every changed snapshot, then a
    single ``completed`` or ``error``. Never raises the task's exception;
    the caller awaits ``task`` for that.
    """
    on_event(_event("started", job_id))
    last: Optional[ValidationProgress] = None

    while not task.done():
        snap = service.get_progress(job_id)
        if snap is not None and snap != last:
            data = asdict(snap)
            data.pop("job_id")
            on_event(_event("progress", job_id, **data))
            last = snap
        await asyncio.wait({task}, timeout=interval)

    if task.cancelled():
        on_event(_event("error", job_id, error="validation task cancelled"))
        return
    exc = task.exception()
    if exc is not None:
        on_event(_event("error", job_id, error=str(exc)))
        return

    result = service.get_result(job_id)
    on_event(
        _event(
            "completed",
            job_id,
            status=result.status.value if result else None,
            processed_rows=result.processed_rows if result else 0,
            total_rows=result.total_rows if result else 0,
            is_valid=result.is_valid if result else False,
        )
    )
