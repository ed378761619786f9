from benchgate.validation.catalog import ConditionOption, conditions_for, is_allowed, kind_for, label_for
from benchgate.validation.evaluator import RuleEvaluator
from benchgate.validation.resolver import ALIASES, FieldAlias, FieldResolver, resolve, traverse
from benchgate.validation.rulesets import (
    DEFAULT_RULE_SET,
    RuleNotFoundError,
    RuleSetNotFoundError,
    RuleSetRegistry,
    default_rules,
)
from benchgate.validation.runner import ValidationRunner, run_validation, summarize
from benchgate.validation.workspace import (
    NoActiveRulesError,
    NoSessionsSelectedError,
    ValidationRunError,
    ValidationWorkspace,
)

__all__ = [
    "ALIASES",
    "ConditionOption",
    "DEFAULT_RULE_SET",
    "FieldAlias",
    "FieldResolver",
    "NoActiveRulesError",
    "NoSessionsSelectedError",
    "RuleEvaluator",
    "RuleNotFoundError",
    "RuleSetNotFoundError",
    "RuleSetRegistry",
    "ValidationRunError",
    "ValidationRunner",
    "ValidationWorkspace",
    "conditions_for",
    "default_rules",
    "is_allowed",
    "kind_for",
    "label_for",
    "resolve",
    "run_validation",
    "summarize",
    "traverse",
]
