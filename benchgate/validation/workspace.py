from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from benchgate.core.coercion import as_text
from benchgate.models.results import ValidationResult, ValidationSummary
from benchgate.models.sessions import Session
from benchgate.models.values import MISSING
from benchgate.validation.rulesets import RuleSetRegistry
from benchgate.validation.runner import ValidationRunner

logger = logging.getLogger(__name__)


class ValidationRunError(RuntimeError):
    """A validation run could not start."""


class NoActiveRulesError(ValidationRunError):
    def __init__(self, rule_set: str) -> None:
        self.rule_set = rule_set
        super().__init__(f"no active rules in rule set {rule_set!r}")


class NoSessionsSelectedError(ValidationRunError):
    def __init__(self) -> None:
        super().__init__("no sessions selected for validation")


class ValidationWorkspace:
    """Saved sessions, the rule sets to apply to them and the latest results.

    The runner stays stateless; everything a user accumulates between runs
    lives here.
    """

    def __init__(
        self,
        rule_sets: RuleSetRegistry | None = None,
        runner: ValidationRunner | None = None,
    ) -> None:
        self.rule_sets = rule_sets or RuleSetRegistry.with_defaults()
        self.runner = runner or ValidationRunner()
        self._saved: dict[str, Session] = {}
        self._results: list[ValidationResult] = []

    @property
    def saved_sessions(self) -> list[Session]:
        return list(self._saved.values())

    @property
    def results(self) -> list[ValidationResult]:
        return list(self._results)

    def session_id(self, session: Session) -> str | None:
        value = self.runner.evaluator.resolver.resolve(session, "session.id")
        if value is MISSING:
            return None
        return as_text(value) or None

    def save_session(self, session: Session) -> bool:
        session_id = self.session_id(session)
        if session_id is None:
            raise ValueError("session has no id")
        if session_id in self._saved:
            logger.info("session %s is already saved", session_id)
            return False
        self._saved[session_id] = session
        return True

    def save_sessions(self, sessions: Iterable[Session]) -> int:
        return sum(1 for session in sessions if self.save_session(session))

    def remove_saved_session(self, session_id: str) -> bool:
        return self._saved.pop(session_id, None) is not None

    def validate(self, session_ids: Sequence[str] | None = None) -> list[ValidationResult]:
        """Run the active rule set over the chosen saved sessions.

        ``None`` selects every saved session. Ids that were never saved are
        skipped.
        """
        rules = self.rule_sets.enabled_rules()
        if not rules:
            raise NoActiveRulesError(self.rule_sets.active_name)
        wanted = list(self._saved) if session_ids is None else list(session_ids)
        if not wanted:
            raise NoSessionsSelectedError()

        sessions: list[Session] = []
        for session_id in wanted:
            session = self._saved.get(session_id)
            if session is None:
                logger.warning("session %s not found in saved sessions, skipping", session_id)
                continue
            sessions.append(session)

        self._results = self.runner.run(sessions, rules)
        logger.info(ValidationSummary.from_results(self._results).describe())
        return list(self._results)

    def clear_results(self) -> None:
        self._results = []


__all__ = [
    "NoActiveRulesError",
    "NoSessionsSelectedError",
    "ValidationRunError",
    "ValidationWorkspace",
]
