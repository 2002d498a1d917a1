from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Tuple, Union

from .rules import ValidationRule


@dataclass(frozen=True)
class ValidationOptions:
    batch_size: int = 1000
    max_preview_rows: int = 100
    enable_real_time_updates: bool = True
    validation_rules: Tuple[ValidationRule, ...] = ()
    # Percent of processed rows; the run stops once the running error rate exceeds it
    stop_on_error_threshold: float = 50.0
    # None keeps every issue entry; counts stay exact either way
    max_retained_issues: Optional[int] = None


DEFAULT_OPTIONS = ValidationOptions()

_OPTION_NAMES = frozenset(f.name for f in fields(ValidationOptions))


def merge_options(
    overrides: Union[ValidationOptions, Mapping[str, Any], None] = None,
    base: ValidationOptions = DEFAULT_OPTIONS,
) -> ValidationOptions:
    """Layer caller options over ``base`` and check the result.

    Mapping overrides may omit keys; keys set to None keep the base value,
    except ``max_retained_issues`` where None means unbounded.
    """
    if overrides is None:
        merged = base
    elif isinstance(overrides, ValidationOptions):
        merged = overrides
    else:
        unknown = set(overrides) - _OPTION_NAMES
        if unknown:
            raise ValueError(f"Unknown validation options: {sorted(unknown)}")
        changes = {
            k: v
            for k, v in overrides.items()
            if v is not None or k == "max_retained_issues"
        }
        if "validation_rules" in changes:
            changes["validation_rules"] = tuple(changes["validation_rules"])
        merged = replace(base, **changes)

    _check(merged)
    return merged


def _check(opts: ValidationOptions) -> None:
    if opts.batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {opts.batch_size}")
    if opts.max_preview_rows < 0:
        raise ValueError(f"max_preview_rows must be >= 0, got {opts.max_preview_rows}")
    if opts.stop_on_error_threshold < 0:
        raise ValueError(
            f"stop_on_error_threshold must be >= 0, got {opts.stop_on_error_threshold}"
        )
    if opts.max_retained_issues is not None and opts.max_retained_issues < 1:
        raise ValueError(
            f"max_retained_issues must be >= 1 or None, got {opts.max_retained_issues}"
        )
