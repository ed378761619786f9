from __future__ import annotations

from dataclasses import dataclass

from benchgate.models.rules import Condition
from benchgate.models.values import ValueKind
from benchgate.validation.resolver import ALIASES


@dataclass(frozen=True, slots=True)
class ConditionOption:
    condition: Condition
    label: str


_EXISTENCE_OPTIONS: tuple[ConditionOption, ...] = (
    ConditionOption(Condition.exists, "Exists"),
    ConditionOption(Condition.not_exists, "Does Not Exist"),
)

_CONDITIONS: dict[ValueKind, tuple[ConditionOption, ...]] = {
    ValueKind.number: (
        ConditionOption(Condition.gt, "Greater Than (>)"),
        ConditionOption(Condition.gte, "Greater Than or Equal (>=)"),
        ConditionOption(Condition.lt, "Less Than (<)"),
        ConditionOption(Condition.lte, "Less Than or Equal (<=)"),
        ConditionOption(Condition.eq, "Equal To (==)"),
        ConditionOption(Condition.ne, "Not Equal To (!=)"),
        ConditionOption(Condition.between, "Between"),
        *_EXISTENCE_OPTIONS,
    ),
    ValueKind.string: (
        ConditionOption(Condition.equals, "Equals"),
        ConditionOption(Condition.not_equals, "Does Not Equal"),
        ConditionOption(Condition.contains, "Contains"),
        ConditionOption(Condition.not_contains, "Does Not Contain"),
        ConditionOption(Condition.starts_with, "Starts With"),
        ConditionOption(Condition.ends_with, "Ends With"),
        ConditionOption(Condition.is_empty, "Is Empty"),
        ConditionOption(Condition.is_not_empty, "Is Not Empty"),
        ConditionOption(Condition.matches, "Matches Pattern"),
        *_EXISTENCE_OPTIONS,
    ),
    ValueKind.boolean: (
        ConditionOption(Condition.is_true, "Is True"),
        ConditionOption(Condition.is_false, "Is False"),
        ConditionOption(Condition.equals, "Equals"),
        *_EXISTENCE_OPTIONS,
    ),
    ValueKind.date: (
        ConditionOption(Condition.before, "Before"),
        ConditionOption(Condition.after, "After"),
        ConditionOption(Condition.on, "On"),
        ConditionOption(Condition.between, "Between"),
        *_EXISTENCE_OPTIONS,
    ),
}

# Accepted on stored rules but no longer offered to new ones.
_LEGACY_CONDITIONS: dict[ValueKind, frozenset[Condition]] = {
    ValueKind.number: frozenset({Condition.not_null}),
}

_ALLOWED: dict[ValueKind, frozenset[Condition]] = {
    kind: frozenset(option.condition for option in options)
    | _LEGACY_CONDITIONS.get(kind, frozenset())
    for kind, options in _CONDITIONS.items()
}

# Checked in order; the first kind with a matching substring wins.
_KIND_HINTS: tuple[tuple[ValueKind, tuple[str, ...]], ...] = (
    (ValueKind.date, ("date", "timestamp", "timepushed")),
    (ValueKind.boolean, ("isactive", "ischarging", "isshared")),
    (
        ValueKind.string,
        (
            "name",
            "model",
            "manufacturer",
            "id",
            "uuid",
            "package",
            "recordedby",
            "version",
            "vendor",
            "renderer",
            "tag",
        ),
    ),
)


def conditions_for(kind: ValueKind | str) -> list[ConditionOption]:
    return list(_CONDITIONS[ValueKind(kind)])


def is_allowed(kind: ValueKind | str, condition: Condition | str) -> bool:
    try:
        return Condition(condition) in _ALLOWED[ValueKind(kind)]
    except ValueError:
        return False


def kind_for(field_path: str) -> ValueKind:
    """Infer the value kind of *field_path* for new-rule defaults."""
    alias = ALIASES.get(field_path)
    if alias is not None:
        return alias.kind

    lowered = field_path.lower()
    for kind, hints in _KIND_HINTS:
        if any(hint in lowered for hint in hints):
            return kind
    return ValueKind.number


def label_for(condition: Condition | str) -> str:
    wanted = Condition(condition)
    for options in _CONDITIONS.values():
        for option in options:
            if option.condition == wanted:
                return option.label
    return wanted.value


__all__ = ["ConditionOption", "conditions_for", "is_allowed", "kind_for", "label_for"]
