from __future__ import annotations

import logging
import math
import re
from datetime import datetime

from benchgate.core.coercion import as_number, as_pair, as_text, as_timestamp
from benchgate.models.results import RuleOutcome
from benchgate.models.rules import Condition, ValidationRule
from benchgate.models.sessions import Session
from benchgate.models.values import MISSING, ValueKind
from benchgate.validation.catalog import is_allowed
from benchgate.validation.resolver import FieldResolver

logger = logging.getLogger(__name__)


class RuleEvaluator:
    """Deterministic pass/fail evaluation of one rule against one session.

    Evaluation never raises: missing data, coercion failures, malformed
    patterns and unknown condition combinations all fail the rule.
    """

    def __init__(
        self,
        resolver: FieldResolver | None = None,
        *,
        float_tolerance: float = 0.0,
    ) -> None:
        if float_tolerance < 0:
            raise ValueError("float_tolerance must be >= 0")
        self._resolver = resolver or FieldResolver()
        self._float_tolerance = float_tolerance

    @property
    def resolver(self) -> FieldResolver:
        return self._resolver

    def evaluate(self, session: Session, rule: ValidationRule) -> bool:
        return self.check(session, rule).passed

    def check(self, session: Session, rule: ValidationRule) -> RuleOutcome:
        actual = self._resolver.resolve(session, rule.field)
        passed, reason = self._verdict(rule, actual)
        return RuleOutcome(
            rule_id=rule.id,
            rule_name=rule.name,
            field=rule.field,
            expected_condition=str(rule.condition),
            expected_value=rule.value,
            actual_value=None if actual is MISSING else actual,
            missing=actual is MISSING,
            passed=passed,
            reason=reason,
        )

    def _verdict(self, rule: ValidationRule, actual: object) -> tuple[bool, str]:
        # Rules built with model_construct skip validation.
        try:
            condition = Condition(rule.condition)
            kind = ValueKind(rule.operator)
        except ValueError:
            return False, f"unknown condition {rule.condition!r} for kind {rule.operator!r}"

        if condition in (Condition.exists, Condition.not_null):
            if actual is MISSING:
                return False, f"{rule.field} is missing"
            return True, f"{rule.field} is present"
        if condition == Condition.not_exists:
            if actual is MISSING:
                return True, f"{rule.field} is missing"
            return False, f"{rule.field} is present"

        if actual is MISSING:
            return False, f"{rule.field} is missing"
        if not is_allowed(kind, condition):
            return False, f"condition {condition.value!r} is not valid for {kind.value} rules"

        if kind == ValueKind.string:
            return self._evaluate_string(rule, condition, actual)
        if kind == ValueKind.number:
            return self._evaluate_number(rule, condition, actual)
        if kind == ValueKind.boolean:
            return self._evaluate_boolean(rule, condition, actual)
        return self._evaluate_date(rule, condition, actual)

    def _evaluate_string(
        self, rule: ValidationRule, condition: Condition, actual: object
    ) -> tuple[bool, str]:
        text = as_text(actual)
        expected = as_text(rule.value)

        if condition == Condition.is_empty:
            return self._result(text == "", f"{text!r} is empty", f"{text!r} is not empty")
        if condition == Condition.is_not_empty:
            return self._result(text != "", f"{text!r} is not empty", f"{text!r} is empty")
        if condition == Condition.equals:
            return self._result(text == expected, f"{text!r} equals {expected!r}", f"{text!r} != {expected!r}")
        if condition == Condition.not_equals:
            return self._result(text != expected, f"{text!r} != {expected!r}", f"{text!r} equals {expected!r}")
        if condition == Condition.contains:
            return self._result(
                expected in text, f"{text!r} contains {expected!r}", f"{text!r} lacks {expected!r}"
            )
        if condition == Condition.not_contains:
            return self._result(
                expected not in text, f"{text!r} lacks {expected!r}", f"{text!r} contains {expected!r}"
            )
        if condition == Condition.starts_with:
            return self._result(
                text.startswith(expected),
                f"{text!r} starts with {expected!r}",
                f"{text!r} does not start with {expected!r}",
            )
        if condition == Condition.ends_with:
            return self._result(
                text.endswith(expected),
                f"{text!r} ends with {expected!r}",
                f"{text!r} does not end with {expected!r}",
            )
        if condition == Condition.matches:
            try:
                compiled = re.compile(expected)
            except re.error as exc:
                logger.debug("invalid regex in rule %s: %s", rule.id, exc)
                return False, f"invalid regex pattern: {exc}"
            return self._result(
                compiled.search(text) is not None,
                f"{text!r} matched {expected!r}",
                f"{text!r} did not match {expected!r}",
            )
        return False, f"unsupported string condition: {condition.value}"

    def _evaluate_number(
        self, rule: ValidationRule, condition: Condition, actual: object
    ) -> tuple[bool, str]:
        value = as_number(actual)
        if value is None:
            logger.debug("rule %s: %r is not numeric", rule.id, actual)
            return False, f"value is not numeric: {actual!r}"

        if condition == Condition.between:
            bounds = self._number_bounds(rule.value)
            if bounds is None:
                return False, f"invalid range: {rule.value!r}"
            low, high = bounds
            return self._result(
                low <= value <= high,
                f"{value:g} inside [{low:g}, {high:g}]",
                f"{value:g} outside [{low:g}, {high:g}]",
            )

        expected = as_number(rule.value) if not isinstance(rule.value, bool) else None
        if expected is None:
            return False, f"expected value is not numeric: {rule.value!r}"

        if condition == Condition.gt:
            passed = value > expected
        elif condition == Condition.gte:
            passed = value >= expected
        elif condition == Condition.lt:
            passed = value < expected
        elif condition == Condition.lte:
            passed = value <= expected
        elif condition == Condition.eq:
            passed = self._numbers_equal(value, expected)
        elif condition == Condition.ne:
            passed = not self._numbers_equal(value, expected)
        else:
            return False, f"unsupported number condition: {condition.value}"
        verdict = "holds" if passed else "fails"
        return passed, f"{value:g} {condition.value} {expected:g} {verdict}"

    def _evaluate_boolean(
        self, rule: ValidationRule, condition: Condition, actual: object
    ) -> tuple[bool, str]:
        truth = bool(actual)
        if condition == Condition.is_true:
            return self._result(truth, "value is true", "value is false")
        if condition == Condition.is_false:
            return self._result(not truth, "value is false", "value is true")
        if condition == Condition.equals:
            expected = bool(rule.value)
            return self._result(
                truth == expected,
                f"value equals {as_text(expected)}",
                f"value is {as_text(truth)}, expected {as_text(expected)}",
            )
        return False, f"unsupported boolean condition: {condition.value}"

    def _evaluate_date(
        self, rule: ValidationRule, condition: Condition, actual: object
    ) -> tuple[bool, str]:
        moment = as_timestamp(actual)
        if moment is None:
            logger.debug("rule %s: %r is not a date", rule.id, actual)
            return False, f"value is not a date: {actual!r}"

        if condition == Condition.between:
            bounds = self._date_bounds(rule.value)
            if bounds is None:
                return False, f"invalid date range: {rule.value!r}"
            start, end = bounds
            return self._result(
                start <= moment <= end,
                f"{_iso(moment)} inside [{_iso(start)}, {_iso(end)}]",
                f"{_iso(moment)} outside [{_iso(start)}, {_iso(end)}]",
            )

        expected = as_timestamp(rule.value)
        if expected is None:
            return False, f"expected value is not a date: {rule.value!r}"

        if condition == Condition.before:
            return self._result(
                moment < expected,
                f"{_iso(moment)} before {_iso(expected)}",
                f"{_iso(moment)} not before {_iso(expected)}",
            )
        if condition == Condition.after:
            return self._result(
                moment > expected,
                f"{_iso(moment)} after {_iso(expected)}",
                f"{_iso(moment)} not after {_iso(expected)}",
            )
        if condition == Condition.on:
            return self._result(
                moment.date() == expected.date(),
                f"{moment.date()} on {expected.date()}",
                f"{moment.date()} not on {expected.date()}",
            )
        return False, f"unsupported date condition: {condition.value}"

    def _numbers_equal(self, left: float, right: float) -> bool:
        if self._float_tolerance > 0:
            return math.isclose(left, right, rel_tol=0.0, abs_tol=self._float_tolerance)
        return left == right

    def _number_bounds(self, value: object) -> tuple[float, float] | None:
        pair = as_pair(value)
        if pair is None:
            return None
        low, high = pair
        if isinstance(low, bool) or isinstance(high, bool):
            return None
        low_number = as_number(low)
        high_number = as_number(high)
        if low_number is None or high_number is None:
            return None
        return (low_number, high_number)

    def _date_bounds(self, value: object) -> tuple[datetime, datetime] | None:
        pair = as_pair(value)
        if pair is None:
            return None
        start = as_timestamp(pair[0])
        end = as_timestamp(pair[1])
        if start is None or end is None:
            return None
        return (start, end)

    def _result(self, passed: bool, pass_reason: str, fail_reason: str) -> tuple[bool, str]:
        return passed, pass_reason if passed else fail_reason


def _iso(moment: datetime) -> str:
    return moment.isoformat()


__all__ = ["RuleEvaluator"]
