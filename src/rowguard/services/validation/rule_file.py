from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping

import yaml

from ...domain.rules import DataType, RuleConfig, RuleType, Severity, ValidationRule


def _enum_value(enum_cls: Any, raw: Any, what: str, where: str) -> Any:
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{where}: unknown {what} '{raw}' (expected one of: {allowed})") from None


def _optional_float(raw: Any) -> float | None:
    return None if raw is None else float(raw)


def _optional_int(raw: Any) -> int | None:
    return None if raw is None else int(raw)


def rule_from_mapping(raw: Mapping[str, Any], index: int) -> ValidationRule:
    """Build a rule from one YAML entry. ``field`` and ``type`` are mandatory."""
    where = f"rule #{index + 1}"
    if not isinstance(raw, Mapping):
        raise ValueError(f"{where}: expected a mapping, got {type(raw).__name__}")
    if "field" not in raw or "type" not in raw:
        raise ValueError(f"{where}: 'field' and 'type' are required")

    rule_type = _enum_value(RuleType, raw["type"], "type", where)
    severity = _enum_value(Severity, raw.get("severity", "error"), "severity", where)

    cfg_raw = raw.get("config") or {}
    if not isinstance(cfg_raw, Mapping):
        raise ValueError(f"{where}: 'config' must be a mapping")
    data_type = cfg_raw.get("data_type")
    allow_empty = cfg_raw.get("allow_empty")
    config = RuleConfig(
        data_type=_enum_value(DataType, data_type, "data_type", where) if data_type else None,
        min_length=_optional_int(cfg_raw.get("min_length")),
        max_length=_optional_int(cfg_raw.get("max_length")),
        min=_optional_float(cfg_raw.get("min")),
        max=_optional_float(cfg_raw.get("max")),
        pattern=cfg_raw.get("pattern"),
        custom_function=cfg_raw.get("custom_function"),
        allow_empty=None if allow_empty is None else bool(allow_empty),
    )

    field = str(raw["field"])
    return ValidationRule(
        id=str(raw.get("id", f"rule-{index}")),
        name=str(raw.get("name", f"{rule_type.value} ({field})")),
        type=rule_type,
        field=field,
        severity=severity,
        config=config,
        message=str(raw.get("message", "")),
        is_active=bool(raw.get("active", True)),
        order=int(raw.get("order", index)),
    )


def load_rules(path: Path) -> List[ValidationRule]:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    entries = raw.get("rules", []) if isinstance(raw, dict) else []
    if not isinstance(entries, list):
        raise ValueError(f"{path}: 'rules' must be a list")
    return [rule_from_mapping(entry, i) for i, entry in enumerate(entries)]
