from __future__ import annotations

from benchgate.models.results import (
    OverallResult,
    RuleOutcome,
    ValidationResult,
    ValidationSummary,
)
from benchgate.models.rules import (
    EXISTENCE_CONDITIONS,
    Condition,
    RuleSet,
    ValidationRule,
    new_rule_id,
)
from benchgate.models.sessions import Session, SessionPage, SessionQuery
from benchgate.models.values import MISSING, Missing, ValueKind, is_missing

__all__ = [
    "EXISTENCE_CONDITIONS",
    "MISSING",
    "Condition",
    "Missing",
    "OverallResult",
    "RuleOutcome",
    "RuleSet",
    "Session",
    "SessionPage",
    "SessionQuery",
    "ValidationResult",
    "ValidationRule",
    "ValidationSummary",
    "ValueKind",
    "is_missing",
    "new_rule_id",
]
