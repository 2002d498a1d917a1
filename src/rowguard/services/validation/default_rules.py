from __future__ import annotations

from typing import Iterable, List, Sequence

from ...domain.rules import DataType, RuleConfig, RuleType, Severity, ValidationRule
from ...utils.normalize import header_key


def default_rules(headers: Sequence[str]) -> List[ValidationRule]:
    """Derive baseline rules from header names.

    - required: header contains "email", "id" or "name"
    - email format: header contains "email"
    - numeric: header contains "id" but not "name"

    A header can match several heuristics and get several rules.
    """
    rules: List[ValidationRule] = []
    for index, header in enumerate(headers):
        key = header_key(header)

        if "email" in key or "id" in key or "name" in key:
            rules.append(
                ValidationRule(
                    id=f"required-{index}",
                    name="Required Field",
                    type=RuleType.REQUIRED,
                    field=header,
                    severity=Severity.ERROR,
                    message=f"{header} is required",
                    order=1,
                )
            )

        if "email" in key:
            rules.append(
                ValidationRule(
                    id=f"email-{index}",
                    name="Email Format",
                    type=RuleType.DATA_TYPE,
                    field=header,
                    severity=Severity.ERROR,
                    config=RuleConfig(data_type=DataType.EMAIL),
                    message=f"{header} must be a valid email address",
                    order=2,
                )
            )

        if "id" in key and "name" not in key:
            rules.append(
                ValidationRule(
                    id=f"numeric-{index}",
                    name="Numeric Field",
                    type=RuleType.DATA_TYPE,
                    field=header,
                    severity=Severity.ERROR,
                    config=RuleConfig(data_type=DataType.NUMBER),
                    message=f"{header} must be a number",
                    order=2,
                )
            )
    return rules


def resolve_rules(
    headers: Sequence[str], extra: Iterable[ValidationRule] = ()
) -> List[ValidationRule]:
    """Default rules followed by caller-supplied ones, without deduplication."""
    return default_rules(headers) + list(extra)
