from __future__ import annotations

import logging

import pytest

from benchgate.models.rules import RuleSet
from benchgate.validation.rulesets import RuleSetRegistry
from benchgate.validation.workspace import (
    NoActiveRulesError,
    NoSessionsSelectedError,
    ValidationRunError,
    ValidationWorkspace,
)
from tests.helpers import make_rule


@pytest.fixture
def workspace() -> ValidationWorkspace:
    registry = RuleSetRegistry(
        [RuleSet(name="Smoke", rules=[make_rule("fps.min", ">=", 0, rule_id="min-fps")])]
    )
    return ValidationWorkspace(registry)


class TestSavedSessions:
    def test_save_and_dedupe(
        self, workspace: ValidationWorkspace, caplog: pytest.LogCaptureFixture
    ) -> None:
        assert workspace.save_session({"id": "s1", "fpsMin": 10}) is True
        with caplog.at_level(logging.INFO, logger="benchgate.validation.workspace"):
            assert workspace.save_session({"id": "s1", "fpsMin": 99}) is False
        assert "already saved" in caplog.text
        assert workspace.saved_sessions == [{"id": "s1", "fpsMin": 10}]

    def test_uuid_is_used_when_id_absent(self, workspace: ValidationWorkspace) -> None:
        workspace.save_session({"uuid": "abc-123"})
        assert workspace.session_id(workspace.saved_sessions[0]) == "abc-123"

    def test_session_without_id(self, workspace: ValidationWorkspace) -> None:
        with pytest.raises(ValueError, match="no id"):
            workspace.save_session({"fpsMin": 3})

    def test_remove(self, workspace: ValidationWorkspace) -> None:
        workspace.save_sessions([{"id": "s1"}, {"id": "s2"}])
        assert workspace.remove_saved_session("s1") is True
        assert workspace.remove_saved_session("s1") is False
        assert [s["id"] for s in workspace.saved_sessions] == ["s2"]


class TestValidate:
    def test_runs_selected_sessions_in_order(self, workspace: ValidationWorkspace) -> None:
        workspace.save_sessions(
            [{"id": "a", "fpsMin": 5}, {"id": "b", "fpsMin": -1}, {"id": "c", "fpsMin": 0}]
        )

        results = workspace.validate(["c", "b"])

        assert [result.session_id for result in results] == ["c", "b"]
        assert [result.overall_result for result in results] == ["pass", "fail"]
        assert workspace.results == results

    def test_all_saved_sessions_by_default(self, workspace: ValidationWorkspace) -> None:
        workspace.save_sessions([{"id": "a", "fpsMin": 5}, {"id": "b", "fpsMin": 6}])
        assert len(workspace.validate()) == 2

    def test_unknown_ids_are_skipped(
        self, workspace: ValidationWorkspace, caplog: pytest.LogCaptureFixture
    ) -> None:
        workspace.save_session({"id": "a", "fpsMin": 5})
        with caplog.at_level(logging.WARNING, logger="benchgate.validation.workspace"):
            results = workspace.validate(["ghost", "a"])
        assert [result.session_id for result in results] == ["a"]
        assert "ghost" in caplog.text

    def test_no_active_rules(self, workspace: ValidationWorkspace) -> None:
        workspace.save_session({"id": "a"})
        workspace.rule_sets.toggle_rule("min-fps", False)
        with pytest.raises(NoActiveRulesError):
            workspace.validate()

    def test_no_sessions(self, workspace: ValidationWorkspace) -> None:
        with pytest.raises(NoSessionsSelectedError):
            workspace.validate()
        with pytest.raises(ValidationRunError):
            workspace.validate([])

    def test_summary_is_logged(
        self, workspace: ValidationWorkspace, caplog: pytest.LogCaptureFixture
    ) -> None:
        workspace.save_sessions([{"id": "a", "fpsMin": 5}, {"id": "b", "fpsMin": -5}])
        with caplog.at_level(logging.INFO, logger="benchgate.validation.workspace"):
            workspace.validate()
        assert "Validation complete: 1 passed, 1 failed" in caplog.text

    def test_clear_results(self, workspace: ValidationWorkspace) -> None:
        workspace.save_session({"id": "a", "fpsMin": 5})
        workspace.validate()
        workspace.clear_results()
        assert workspace.results == []

    def test_default_workspace_uses_seed_rules(self) -> None:
        workspace = ValidationWorkspace()
        assert workspace.rule_sets.active_name == "Default Rules"
        assert len(workspace.rule_sets.enabled_rules()) == 7
