from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from benchgate.models.rules import Condition, RuleSet
from benchgate.validation.rulesets import (
    DEFAULT_RULE_SET,
    RuleNotFoundError,
    RuleSetNotFoundError,
    RuleSetRegistry,
    default_rules,
    load_rule_set,
)
from tests.helpers import make_rule


def test_default_rules() -> None:
    rules = default_rules()
    assert [rule.id for rule in rules] == ["1", "2", "3", "4", "5", "6", "7"]
    assert [rule.field for rule in rules] == [
        "fps.min",
        "fps.stability",
        "cpu.avg",
        "battery.first",
        "session.duration",
        "androidMemory.avg",
        "app.launchTime",
    ]
    assert rules[1].condition is Condition.between
    assert rules[1].value == (0, 100)
    assert all(rule.enabled for rule in rules)


def test_default_rules_are_fresh_copies() -> None:
    first = default_rules()
    first[0].value = 99
    assert default_rules()[0].value == 0


class TestRuleSets:
    def test_seeded_sets(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        assert registry.set_names() == ["Default Rules", "Performance Rules", "Battery Rules"]
        assert registry.active_name == DEFAULT_RULE_SET
        assert len(registry.list_rules()) == 7
        assert registry.list_rules("Battery Rules") == []

    def test_create_and_select(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        registry.create_set("Thermal", [make_rule("fps.min", ">", 0, rule_id="t1")])
        selected = registry.select_set("Thermal")
        assert registry.active is selected
        assert [rule.id for rule in registry.enabled_rules()] == ["t1"]

    def test_duplicate_set_name(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        with pytest.raises(ValueError, match="already exists"):
            registry.create_set("Battery Rules")

    def test_select_unknown(self) -> None:
        with pytest.raises(RuleSetNotFoundError):
            RuleSetRegistry.with_defaults().select_set("Nope")

    def test_delete_active_set_falls_back(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        assert registry.delete_set(DEFAULT_RULE_SET) is True
        assert registry.active_name == "Performance Rules"
        assert registry.delete_set(DEFAULT_RULE_SET) is False

    def test_last_set_cannot_be_deleted(self) -> None:
        registry = RuleSetRegistry([RuleSet(name="Only")])
        with pytest.raises(ValueError, match="last rule set"):
            registry.delete_set("Only")

    def test_registry_needs_a_set(self) -> None:
        with pytest.raises(ValueError):
            RuleSetRegistry([])


class TestRuleCrud:
    def test_create_assigns_id(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        rule = registry.create_rule(
            {"name": "Jank budget", "field": "janks.big.count", "condition": "<=", "value": 3}
        )
        assert rule.id
        assert registry.get_rule(rule.id) == rule
        assert registry.list_rules()[-1] == rule

    def test_create_rejects_duplicate_id(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        with pytest.raises(ValueError, match="already exists"):
            registry.create_rule(make_rule("fps.min", ">", 0, rule_id="1"))

    def test_create_validates(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        with pytest.raises(ValidationError):
            registry.create_rule({"name": "bad", "field": "fps.min", "condition": "between", "value": 5})

    def test_update_revalidates(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        updated = registry.update_rule("1", value=30)
        assert updated.value == 30
        assert registry.get_rule("1").value == 30
        with pytest.raises(ValidationError):
            registry.update_rule("1", condition="between")
        assert registry.get_rule("1").condition is Condition.gte

    def test_update_cannot_change_id(self) -> None:
        with pytest.raises(ValueError, match="cannot be changed"):
            RuleSetRegistry.with_defaults().update_rule("1", id="99")

    def test_toggle(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        registry.toggle_rule("3", False)
        assert "3" not in [rule.id for rule in registry.enabled_rules()]
        assert len(registry.list_rules()) == 7

    def test_delete(self) -> None:
        registry = RuleSetRegistry.with_defaults()
        assert registry.delete_rule("2") is True
        assert registry.delete_rule("2") is False
        with pytest.raises(RuleNotFoundError):
            registry.get_rule("2")

    def test_rule_not_found_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            RuleSetRegistry.with_defaults().update_rule("missing", value=1)


class TestYaml:
    def test_export_import_round_trip(self, tmp_path: Path) -> None:
        registry = RuleSetRegistry.with_defaults()
        target = registry.export_yaml(tmp_path / "rules" / "default.yaml")

        raw = yaml.safe_load(target.read_text(encoding="utf-8"))
        assert raw["name"] == DEFAULT_RULE_SET
        assert raw["rules"][1]["value"] == [0, 100]
        assert raw["rules"][0]["condition"] == ">="

        other = RuleSetRegistry([RuleSet(name="Scratch")])
        imported = other.import_yaml(target)
        assert imported.rules == registry.list_rules()

    def test_import_existing_name_requires_replace(self, tmp_path: Path) -> None:
        registry = RuleSetRegistry.with_defaults()
        path = registry.export_yaml(tmp_path / "default.yaml")
        with pytest.raises(ValueError, match="already exists"):
            registry.import_yaml(path)
        assert registry.import_yaml(path, replace=True).name == DEFAULT_RULE_SET

    def test_bare_rule_list_uses_file_stem(self, tmp_path: Path) -> None:
        path = tmp_path / "smoke.yaml"
        path.write_text(
            "- name: Has FPS\n  field: fps.min\n  condition: exists\n",
            encoding="utf-8",
        )
        rule_set = load_rule_set(path)
        assert rule_set.name == "smoke"
        assert rule_set.rules[0].condition is Condition.exists

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rule_set(tmp_path / "absent.yaml")
