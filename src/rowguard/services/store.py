from __future__ import annotations

from typing import Dict, Generic, Optional, Protocol, TypeVar

from ..domain.results import RunStatus, ValidationProgress, ValidationResult


T = TypeVar("T")


class KeyedStore(Protocol[T]):
    """Per-job state slot. Swappable for a persistent backend."""

    def get(self, job_id: str) -> Optional[T]: ...

    def put(self, job_id: str, value: T) -> None: ...

    def pop(self, job_id: str) -> Optional[T]: ...

    def __contains__(self, job_id: object) -> bool: ...


class InMemoryStore(Generic[T]):
    def __init__(self) -> None:
        self._items: Dict[str, T] = {}

    def get(self, job_id: str) -> Optional[T]:
        return self._items.get(job_id)

    def put(self, job_id: str, value: T) -> None:
        self._items[job_id] = value

    def pop(self, job_id: str) -> Optional[T]:
        return self._items.pop(job_id, None)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._items

    def __len__(self) -> int:
        return len(self._items)


ProgressStore = KeyedStore[ValidationProgress]
ResultStore = KeyedStore[ValidationResult]
StatusStore = KeyedStore[RunStatus]
