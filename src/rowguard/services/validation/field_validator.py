from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Sequence

from ...domain.errors import IssueCategory, ValidationIssue
from ...domain.rules import RuleConfig, RuleType, Severity, ValidationRule
from ...utils.normalize import is_empty, to_number
from .data_types import check_data_type


CustomCheck = Callable[[Any], bool]


def _fmt_bound(bound: Optional[float]) -> str:
    if bound is None:
        return ""
    if float(bound).is_integer():
        return str(int(bound))
    return str(bound)


def render_message(template: str, rule: ValidationRule, value: Any) -> str:
    if not template:
        return f"{rule.field} failed {rule.name}"
    cfg = rule.config
    replacements = {
        "{value}": "" if value is None else str(value),
        "{field}": rule.field,
        "{min}": _fmt_bound(cfg.min),
        "{max}": _fmt_bound(cfg.max),
        "{min_length}": _fmt_bound(cfg.min_length),
        "{max_length}": _fmt_bound(cfg.max_length),
    }
    out = template
    for token, text in replacements.items():
        out = out.replace(token, text)
    return out


def order_for_evaluation(rules: Sequence[ValidationRule]) -> List[ValidationRule]:
    """Required rules first, otherwise keep the given order."""
    return sorted(rules, key=lambda r: 0 if r.type == RuleType.REQUIRED else 1)


class FieldValidator:
    """Evaluates rules against single cell values.

    ``custom_checks`` is an allow-list of named predicates that ``custom``
    rules may reference through ``config.custom_function``. Rule text is
    never executed; a custom rule naming an unregistered check passes.
    """

    def __init__(
        self,
        logger: logging.Logger,
        custom_checks: Optional[Mapping[str, CustomCheck]] = None,
    ) -> None:
        self.logger = logger
        self.custom_checks: Dict[str, CustomCheck] = dict(custom_checks or {})
        self._patterns: Dict[str, Optional[Pattern[str]]] = {}

    def evaluate(self, value: Any, rule: ValidationRule) -> bool:
        cfg = rule.config

        if is_empty(value):
            if rule.type == RuleType.REQUIRED:
                return False
            if cfg.allow_empty is not False:
                return True

        if rule.type == RuleType.REQUIRED:
            return True
        if rule.type == RuleType.DATA_TYPE:
            return check_data_type(value, cfg.data_type)
        if rule.type == RuleType.FORMAT:
            return self._check_format(value, cfg)
        if rule.type == RuleType.RANGE:
            return self._check_range(value, cfg)
        if rule.type == RuleType.PATTERN:
            return self._check_pattern(value, cfg.pattern)
        if rule.type == RuleType.CUSTOM:
            return self._check_custom(value, cfg.custom_function)
        return True

    def validate_field(
        self,
        value: Any,
        field: str,
        row: int,
        rules: Sequence[ValidationRule],
    ) -> List[ValidationIssue]:
        """Run ``rules`` (already filtered to ``field`` and ordered) on one cell."""
        issues: List[ValidationIssue] = []
        for rule in rules:
            try:
                ok = self.evaluate(value, rule)
            except Exception as exc:
                self.logger.warning(
                    f"Validation rule '{rule.name}' failed for field '{field}' at row {row}: {exc}",
                    extra={"rule_id": rule.id, "field": field, "row": row},
                )
                issues.append(
                    ValidationIssue(
                        row=row,
                        field=field,
                        value=value,
                        rule=rule.name,
                        severity=Severity.ERROR,
                        message=f"Validation rule failed: {exc}",
                        category=IssueCategory.VALIDATION,
                    )
                )
                continue

            if ok:
                continue
            issues.append(
                ValidationIssue(
                    row=row,
                    field=field,
                    value=value,
                    rule=rule.name,
                    severity=rule.severity,
                    message=render_message(rule.message, rule, value),
                    category=IssueCategory.VALIDATION,
                )
            )
            if rule.type == RuleType.REQUIRED:
                # A missing value makes the remaining checks meaningless
                break
        return issues

    def _check_format(self, value: Any, cfg: RuleConfig) -> bool:
        if not isinstance(value, str):
            return False
        if cfg.min_length is not None and len(value) < cfg.min_length:
            return False
        if cfg.max_length is not None and len(value) > cfg.max_length:
            return False
        return True

    def _check_range(self, value: Any, cfg: RuleConfig) -> bool:
        n = to_number(value)
        if n is None or math.isnan(n):
            return False
        if cfg.min is not None and n < cfg.min:
            return False
        if cfg.max is not None and n > cfg.max:
            return False
        return True

    def _compiled(self, pattern: str) -> Optional[Pattern[str]]:
        if pattern not in self._patterns:
            try:
                self._patterns[pattern] = re.compile(pattern)
            except re.error as exc:
                self.logger.warning(
                    f"Invalid regex pattern '{pattern}': {exc}; treating as passing",
                    extra={"pattern": pattern},
                )
                self._patterns[pattern] = None
        return self._patterns[pattern]

    def _check_pattern(self, value: Any, pattern: Optional[str]) -> bool:
        if not pattern or not isinstance(value, str):
            return True
        regex = self._compiled(pattern)
        if regex is None:
            return True
        return regex.search(value) is not None

    def _check_custom(self, value: Any, name: Optional[str]) -> bool:
        if not name:
            return True
        check = self.custom_checks.get(name)
        if check is None:
            self.logger.debug(
                f"No custom check registered as '{name}'; passing", extra={"custom": name}
            )
            return True
        return bool(check(value))
