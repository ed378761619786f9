"""Shared test helpers."""

from __future__ import annotations

from benchgate.models.rules import ValidationRule


def make_rule(
    field: str,
    condition: str,
    value: object = None,
    *,
    operator: str = "number",
    name: str | None = None,
    rule_id: str | None = None,
    enabled: bool = True,
) -> ValidationRule:
    payload: dict[str, object] = {
        "name": name or f"{field} {condition}",
        "field": field,
        "operator": operator,
        "condition": condition,
        "value": value,
        "enabled": enabled,
    }
    if rule_id is not None:
        payload["id"] = rule_id
    return ValidationRule.model_validate(payload)
