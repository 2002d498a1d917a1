from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RuleType(str, Enum):
    REQUIRED = "required"
    DATA_TYPE = "data_type"
    FORMAT = "format"
    RANGE = "range"
    PATTERN = "pattern"
    CUSTOM = "custom"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"


@dataclass(frozen=True)
class RuleConfig:
    data_type: Optional[DataType] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    custom_function: Optional[str] = None
    # None means "not set"; only an explicit False makes non-required rules check blanks
    allow_empty: Optional[bool] = None


@dataclass(frozen=True)
class ValidationRule:
    id: str
    name: str
    type: RuleType
    field: str
    severity: Severity = Severity.ERROR
    config: RuleConfig = field(default_factory=RuleConfig)
    message: str = ""
    is_active: bool = True
    order: int = 0
