from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Set

from ..types import JobProgressUpdate


class JobProgressSink(Protocol):
    """Where per-batch progress is persisted (e.g. the upload job record)."""

    async def update(self, job_id: str, update: JobProgressUpdate) -> None: ...


class NullProgressSink:
    async def update(self, job_id: str, update: JobProgressUpdate) -> None:
        return None


class LoggingProgressSink:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    async def update(self, job_id: str, update: JobProgressUpdate) -> None:
        self.logger.debug(
            f"Job {job_id}: {update['progress']}% ({update['records_processed']} rows)",
            extra={"job_id": job_id, **update},
        )


class ProgressNotifier:
    """Fire-and-forget delivery of progress updates to a sink.

    Each update runs as its own task; the batch loop never waits on it.
    Failures are logged and dropped.
    """

    def __init__(self, sink: JobProgressSink, logger: logging.Logger) -> None:
        self.sink = sink
        self.logger = logger
        self._pending: Set[asyncio.Task[None]] = set()

    def notify(self, job_id: str, update: JobProgressUpdate) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(job_id, update))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, job_id: str, update: JobProgressUpdate) -> None:
        try:
            await self.sink.update(job_id, update)
        except Exception as exc:
            self.logger.warning(
                f"Failed to update job progress for {job_id}: {exc}",
                extra={"job_id": job_id},
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for updates already scheduled."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
