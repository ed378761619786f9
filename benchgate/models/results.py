from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, model_validator

OverallResult = Literal["pass", "fail"]

UNKNOWN_LABEL = "Unknown"


class RuleOutcome(BaseModel, frozen=True):
    rule_id: str
    rule_name: str
    field: str
    expected_condition: str
    expected_value: object = None
    actual_value: object = None
    missing: bool = False
    passed: bool
    reason: str = ""


class ValidationResult(BaseModel, frozen=True):
    session_id: str
    app_name: str = UNKNOWN_LABEL
    device_model: str = UNKNOWN_LABEL
    rules: tuple[RuleOutcome, ...] = ()
    overall_result: OverallResult

    @model_validator(mode="after")
    def _validate_overall_result(self) -> ValidationResult:
        expected = "pass" if all(outcome.passed for outcome in self.rules) else "fail"
        if self.overall_result != expected:
            raise ValueError(
                f"overall_result {self.overall_result!r} does not match rule outcomes ({expected!r})"
            )
        return self

    @classmethod
    def from_outcomes(
        cls,
        session_id: str,
        outcomes: Sequence[RuleOutcome],
        *,
        app_name: str = UNKNOWN_LABEL,
        device_model: str = UNKNOWN_LABEL,
    ) -> ValidationResult:
        return cls(
            session_id=session_id,
            app_name=app_name,
            device_model=device_model,
            rules=tuple(outcomes),
            overall_result="pass" if all(outcome.passed for outcome in outcomes) else "fail",
        )

    @property
    def passed(self) -> bool:
        return self.overall_result == "pass"

    @property
    def failures(self) -> list[RuleOutcome]:
        return [outcome for outcome in self.rules if not outcome.passed]


class ValidationSummary(BaseModel, frozen=True):
    total: int = 0
    passed: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: Sequence[ValidationResult]) -> ValidationSummary:
        passed = sum(1 for result in results if result.passed)
        return cls(total=len(results), passed=passed, failed=len(results) - passed)

    def describe(self) -> str:
        return f"Validation complete: {self.passed} passed, {self.failed} failed"


__all__ = [
    "OverallResult",
    "RuleOutcome",
    "UNKNOWN_LABEL",
    "ValidationResult",
    "ValidationSummary",
]
