"""Named rule sets and CRUD over the rules they hold."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from benchgate.models.rules import RuleSet, ValidationRule, new_rule_id

logger = logging.getLogger(__name__)

DEFAULT_RULE_SET = "Default Rules"
_SEED_RULE_SETS = (DEFAULT_RULE_SET, "Performance Rules", "Battery Rules")


class RuleNotFoundError(KeyError):
    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"rule {rule_id!r} not found")


class RuleSetNotFoundError(KeyError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"rule set {name!r} not found")


def default_rules() -> list[ValidationRule]:
    """Seed rules for a fresh rule set."""
    seeds: list[dict[str, object]] = [
        {
            "id": "1",
            "name": "Minimum FPS Check",
            "field": "fps.min",
            "condition": ">=",
            "value": 0,
            "description": "FPS should never be negative",
        },
        {
            "id": "2",
            "name": "FPS Stability Check",
            "field": "fps.stability",
            "condition": "between",
            "value": [0, 100],
            "description": "FPS stability should be between 0% and 100%",
        },
        {
            "id": "3",
            "name": "CPU Usage Range",
            "field": "cpu.avg",
            "condition": "between",
            "value": [0, 100],
            "description": "Average CPU usage should be between 0% and 100%",
        },
        {
            "id": "4",
            "name": "Battery Level Range",
            "field": "battery.first",
            "condition": "between",
            "value": [0, 100],
            "description": "Battery level should be between 0% and 100%",
        },
        {
            "id": "5",
            "name": "Session Duration Check",
            "field": "session.duration",
            "condition": ">",
            "value": 0,
            "description": "Session duration should be positive",
        },
        {
            "id": "6",
            "name": "Memory Usage Range",
            "field": "androidMemory.avg",
            "condition": ">=",
            "value": 0,
            "description": "Memory usage should not be negative",
        },
        {
            "id": "7",
            "name": "Launch Time Check",
            "field": "app.launchTime",
            "condition": ">=",
            "value": 0,
            "description": "App launch time should not be negative",
        },
    ]
    return [ValidationRule.model_validate({"operator": "number", "enabled": True, **seed}) for seed in seeds]


class RuleSetRegistry:
    """In-memory registry of named rule sets with one active set.

    Rule edits re-validate the whole rule, so a registry never holds a rule
    whose value shape disagrees with its condition.
    """

    def __init__(self, rule_sets: Iterable[RuleSet] | None = None, active: str | None = None) -> None:
        self._sets: dict[str, RuleSet] = {}
        for rule_set in rule_sets or ():
            self._sets[rule_set.name] = rule_set
        if not self._sets:
            raise ValueError("a rule set registry needs at least one rule set")
        self._active = active or next(iter(self._sets))
        if self._active not in self._sets:
            raise RuleSetNotFoundError(self._active)

    @classmethod
    def with_defaults(cls, rules: Iterable[ValidationRule] | None = None) -> RuleSetRegistry:
        seeded = list(rules) if rules is not None else default_rules()
        sets = [RuleSet(name=DEFAULT_RULE_SET, rules=seeded)]
        sets.extend(RuleSet(name=name) for name in _SEED_RULE_SETS[1:])
        return cls(sets, active=DEFAULT_RULE_SET)

    # -- rule sets -----------------------------------------------------

    @property
    def active_name(self) -> str:
        return self._active

    @property
    def active(self) -> RuleSet:
        return self._sets[self._active]

    def set_names(self) -> list[str]:
        return list(self._sets)

    def get_set(self, name: str) -> RuleSet:
        try:
            return self._sets[name]
        except KeyError:
            raise RuleSetNotFoundError(name) from None

    def create_set(self, name: str, rules: Iterable[ValidationRule] = ()) -> RuleSet:
        rule_set = RuleSet(name=name, rules=list(rules))
        if rule_set.name in self._sets:
            raise ValueError(f"rule set {rule_set.name!r} already exists")
        self._sets[rule_set.name] = rule_set
        logger.info("rule set %r created", rule_set.name)
        return rule_set

    def select_set(self, name: str) -> RuleSet:
        rule_set = self.get_set(name)
        self._active = rule_set.name
        return rule_set

    def delete_set(self, name: str) -> bool:
        if name not in self._sets:
            return False
        if len(self._sets) == 1:
            raise ValueError("cannot delete the last rule set")
        del self._sets[name]
        if self._active == name:
            self._active = next(iter(self._sets))
        logger.info("rule set %r deleted", name)
        return True

    # -- rules ---------------------------------------------------------

    def list_rules(self, set_name: str | None = None) -> list[ValidationRule]:
        return list(self._resolve_set(set_name).rules)

    def enabled_rules(self, set_name: str | None = None) -> list[ValidationRule]:
        return [rule for rule in self._resolve_set(set_name).rules if rule.enabled]

    def get_rule(self, rule_id: str, set_name: str | None = None) -> ValidationRule:
        for rule in self._resolve_set(set_name).rules:
            if rule.id == rule_id:
                return rule
        raise RuleNotFoundError(rule_id)

    def create_rule(
        self,
        draft: ValidationRule | Mapping[str, object],
        set_name: str | None = None,
    ) -> ValidationRule:
        """Add a rule to a set, assigning a fresh id unless the draft has one."""
        rule_set = self._resolve_set(set_name)
        payload = dict(draft.model_dump() if isinstance(draft, ValidationRule) else draft)
        if not payload.get("id"):
            payload["id"] = new_rule_id()
        rule = ValidationRule.model_validate(payload)
        if any(existing.id == rule.id for existing in rule_set.rules):
            raise ValueError(f"rule id {rule.id!r} already exists in {rule_set.name!r}")
        rule_set.rules.append(rule)
        logger.info("rule %r created in %r", rule.name, rule_set.name)
        return rule

    def update_rule(
        self,
        rule_id: str,
        set_name: str | None = None,
        **changes: object,
    ) -> ValidationRule:
        if "id" in changes and changes["id"] != rule_id:
            raise ValueError("rule id cannot be changed")
        rule_set = self._resolve_set(set_name)
        index = self._index_of(rule_set, rule_id)
        updated = ValidationRule.model_validate({**rule_set.rules[index].model_dump(), **changes})
        rule_set.rules[index] = updated
        logger.info("rule %r updated", updated.name)
        return updated

    def toggle_rule(self, rule_id: str, enabled: bool, set_name: str | None = None) -> ValidationRule:
        return self.update_rule(rule_id, set_name, enabled=enabled)

    def delete_rule(self, rule_id: str, set_name: str | None = None) -> bool:
        rule_set = self._resolve_set(set_name)
        try:
            index = self._index_of(rule_set, rule_id)
        except RuleNotFoundError:
            return False
        del rule_set.rules[index]
        logger.info("rule %s deleted", rule_id)
        return True

    # -- import / export -----------------------------------------------

    def export_yaml(self, path: str | Path, set_name: str | None = None) -> Path:
        rule_set = self._resolve_set(set_name)
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dump_rule_set(rule_set), encoding="utf-8")
        return target

    def import_yaml(self, path: str | Path, *, replace: bool = False) -> RuleSet:
        rule_set = load_rule_set(path)
        if rule_set.name in self._sets and not replace:
            raise ValueError(f"rule set {rule_set.name!r} already exists")
        self._sets[rule_set.name] = rule_set
        logger.info("rule set %r imported with %d rules", rule_set.name, len(rule_set.rules))
        return rule_set

    def _resolve_set(self, set_name: str | None) -> RuleSet:
        return self.get_set(set_name or self._active)

    def _index_of(self, rule_set: RuleSet, rule_id: str) -> int:
        for index, rule in enumerate(rule_set.rules):
            if rule.id == rule_id:
                return index
        raise RuleNotFoundError(rule_id)


def dump_rule_set(rule_set: RuleSet) -> str:
    payload = rule_set.model_dump(mode="json")
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)


def load_rule_set(path: str | Path) -> RuleSet:
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"rule set file not found: {source}")
    loaded = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    if isinstance(loaded, list):
        loaded = {"name": source.stem, "rules": loaded}
    if not isinstance(loaded, dict):
        raise ValueError("rule set file must contain a mapping or a list of rules")
    return RuleSet.model_validate(loaded)


__all__ = [
    "DEFAULT_RULE_SET",
    "RuleNotFoundError",
    "RuleSetNotFoundError",
    "RuleSetRegistry",
    "default_rules",
    "dump_rule_set",
    "load_rule_set",
]
