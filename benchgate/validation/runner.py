from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterable, Iterator, Sequence

from benchgate.core.coercion import as_text
from benchgate.core.logging import correlation_scope
from benchgate.models.results import UNKNOWN_LABEL, ValidationResult, ValidationSummary
from benchgate.models.rules import ValidationRule
from benchgate.models.sessions import Session
from benchgate.models.values import MISSING
from benchgate.validation.evaluator import RuleEvaluator

logger = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 500


class ValidationRunner:
    """Evaluate enabled rules across a batch of sessions.

    Runs are pure: rules and sessions are snapshotted when the run starts so
    edits made by the caller during a run never produce a partial view.
    """

    def __init__(
        self,
        evaluator: RuleEvaluator | None = None,
        *,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._evaluator = evaluator or RuleEvaluator()
        self._chunk_size = chunk_size

    @property
    def evaluator(self) -> RuleEvaluator:
        return self._evaluator

    def snapshot_rules(self, rules: Iterable[ValidationRule]) -> tuple[ValidationRule, ...]:
        return tuple(rule.model_copy(deep=True) for rule in rules if rule.enabled)

    def run(
        self,
        sessions: Iterable[Session],
        rules: Iterable[ValidationRule],
    ) -> list[ValidationResult]:
        results: list[ValidationResult] = []
        for chunk in self.iter_chunks(sessions, rules):
            results.extend(chunk)
        return results

    def iter_chunks(
        self,
        sessions: Iterable[Session],
        rules: Iterable[ValidationRule],
        chunk_size: int | None = None,
    ) -> Iterator[list[ValidationResult]]:
        size = self._chunk_size if chunk_size is None else chunk_size
        if size < 1:
            raise ValueError("chunk_size must be >= 1")
        enabled = self.snapshot_rules(rules)
        batch = list(sessions)
        run_id = uuid.uuid4().hex[:12]

        results: list[ValidationResult] = []
        for start in range(0, len(batch), size):
            with correlation_scope(run_id=run_id):
                chunk = [self.validate_session(session, enabled) for session in batch[start : start + size]]
            results.extend(chunk)
            yield chunk
        with correlation_scope(run_id=run_id):
            logger.info(
                "%s (%d rules)",
                ValidationSummary.from_results(results).describe(),
                len(enabled),
            )

    async def run_async(
        self,
        sessions: Iterable[Session],
        rules: Iterable[ValidationRule],
        chunk_size: int | None = None,
    ) -> list[ValidationResult]:
        results: list[ValidationResult] = []
        for chunk in self.iter_chunks(sessions, rules, chunk_size):
            results.extend(chunk)
            await asyncio.sleep(0)
        return results

    def validate_session(
        self,
        session: Session,
        rules: Sequence[ValidationRule],
    ) -> ValidationResult:
        session_id = self._display_field(session, "session.id")
        with correlation_scope(session_id=session_id):
            outcomes = [self._evaluator.check(session, rule) for rule in rules]
            failed = sum(1 for outcome in outcomes if not outcome.passed)
            if failed:
                logger.debug("%d of %d rules failed", failed, len(outcomes))
        return ValidationResult.from_outcomes(
            session_id,
            outcomes,
            app_name=self._display_field(session, "app.name"),
            device_model=self._display_field(session, "device.model"),
        )

    def _display_field(self, session: Session, field_path: str) -> str:
        value = self._evaluator.resolver.resolve(session, field_path)
        if value is MISSING:
            return UNKNOWN_LABEL
        text = as_text(value)
        return text or UNKNOWN_LABEL


def run_validation(
    sessions: Iterable[Session],
    rules: Iterable[ValidationRule],
    *,
    evaluator: RuleEvaluator | None = None,
) -> list[ValidationResult]:
    """Validate *sessions* against the enabled *rules* with a fresh runner."""
    return ValidationRunner(evaluator).run(sessions, rules)


def summarize(results: Sequence[ValidationResult]) -> ValidationSummary:
    return ValidationSummary.from_results(results)


__all__ = ["ValidationRunner", "run_validation", "summarize"]
