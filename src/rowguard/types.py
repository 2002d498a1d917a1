from __future__ import annotations

from typing import Any, List, Mapping, Optional, TypedDict


class ConfigOverrides(TypedDict, total=False):
    batch_size: int
    max_preview_rows: int
    stop_on_error_threshold: float
    enable_real_time_updates: bool
    max_retained_issues: int
    poll_interval: float
    max_errors: int


class YamlConfig(TypedDict, total=False):
    batch_size: int
    max_preview_rows: int
    stop_on_error_threshold: float
    enable_real_time_updates: bool
    max_retained_issues: Optional[int]
    poll_interval: float
    max_errors: int


class RuleConfigSpec(TypedDict, total=False):
    data_type: str
    min_length: int
    max_length: int
    min: float
    max: float
    pattern: str
    custom_function: str
    allow_empty: bool


class RuleSpec(TypedDict, total=False):
    id: str
    name: str
    type: str
    field: str
    severity: str
    config: RuleConfigSpec
    message: str
    active: bool
    order: int


class RuleFile(TypedDict, total=False):
    version: str
    rules: List[RuleSpec]


class JobProgressUpdate(TypedDict):
    progress: int
    records_processed: int
    estimated_time_remaining: Optional[float]


class ProgressEvent(TypedDict):
    kind: str  # started | progress | completed | error
    job_id: str
    data: Mapping[str, Any]
