from __future__ import annotations

import uuid
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from benchgate.core.coercion import as_number, as_pair, as_timestamp
from benchgate.models.values import ValueKind


class Condition(StrEnum):
    gt = ">"
    gte = ">="
    lt = "<"
    lte = "<="
    eq = "=="
    ne = "!="
    between = "between"
    exists = "exists"
    not_exists = "notExists"
    not_null = "not_null"
    equals = "equals"
    not_equals = "notEquals"
    contains = "contains"
    not_contains = "notContains"
    starts_with = "startsWith"
    ends_with = "endsWith"
    is_empty = "isEmpty"
    is_not_empty = "isNotEmpty"
    matches = "matches"
    is_true = "isTrue"
    is_false = "isFalse"
    before = "before"
    after = "after"
    on = "on"


EXISTENCE_CONDITIONS: frozenset[Condition] = frozenset(
    {Condition.exists, Condition.not_exists, Condition.not_null}
)
# Conditions that only look at the actual value.
VALUELESS_CONDITIONS: frozenset[Condition] = EXISTENCE_CONDITIONS | {
    Condition.is_empty,
    Condition.is_not_empty,
    Condition.is_true,
    Condition.is_false,
}


def new_rule_id() -> str:
    return uuid.uuid4().hex


class ValidationRule(BaseModel):
    id: str = Field(default_factory=new_rule_id)
    name: str
    field: str
    operator: ValueKind = ValueKind.number
    condition: Condition
    value: object = None
    enabled: bool = True
    description: str = ""

    @field_validator("field")
    @classmethod
    def _validate_field_path(cls, value: str) -> str:
        path = value.strip()
        if not path:
            raise ValueError("field path must not be empty")
        if any(not part for part in path.split(".")):
            raise ValueError(f"field path has an empty segment: {value!r}")
        return path

    @model_validator(mode="after")
    def _validate_value_shape(self) -> ValidationRule:
        # Deferred: the catalog resolves field kinds through the resolver,
        # which itself imports this module.
        from benchgate.validation.catalog import is_allowed

        if self.enabled and not self.name.strip():
            raise ValueError("name is required for enabled rules")
        if not is_allowed(self.operator, self.condition):
            raise ValueError(
                f"condition {self.condition.value!r} is not valid for {self.operator.value} rules"
            )
        if self.condition in VALUELESS_CONDITIONS:
            return self

        if self.condition == Condition.between:
            pair = as_pair(self.value)
            if pair is None:
                raise ValueError("between requires a [min, max] pair")
            for bound in pair:
                self._check_scalar(bound)
            self.value = pair
            return self

        if as_pair(self.value) is not None or isinstance(self.value, (list, tuple, dict)):
            raise ValueError("value must be a scalar unless condition is between")
        self._check_scalar(self.value)
        return self

    def _check_scalar(self, value: object) -> None:
        if self.operator == ValueKind.number:
            if isinstance(value, bool) or as_number(value) is None:
                raise ValueError(f"number rules need a numeric value, got {value!r}")
        elif self.operator == ValueKind.date:
            if as_timestamp(value) is None:
                raise ValueError(f"date rules need an ISO date or epoch millis, got {value!r}")
        elif self.operator == ValueKind.boolean:
            if not isinstance(value, bool):
                raise ValueError(f"boolean rules need true or false, got {value!r}")
        elif value is None or isinstance(value, dict):
            raise ValueError("string rules need a value")

    @property
    def is_existence_check(self) -> bool:
        return self.condition in EXISTENCE_CONDITIONS


class RuleSet(BaseModel):
    name: str
    rules: list[ValidationRule] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("rule set name must not be empty")
        return name

    @model_validator(mode="after")
    def _validate_unique_ids(self) -> RuleSet:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id in rule set: {rule.id}")
            seen.add(rule.id)
        return self


__all__ = [
    "Condition",
    "EXISTENCE_CONDITIONS",
    "RuleSet",
    "VALUELESS_CONDITIONS",
    "ValidationRule",
    "new_rule_id",
]
