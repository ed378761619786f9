"""CSV export of validation results."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from benchgate.core.coercion import as_text
from benchgate.models.results import ValidationResult

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "Session ID",
    "App Name",
    "Device Model",
    "Rule Name",
    "Field",
    "Condition",
    "Expected Value",
    "Actual Value",
    "Result",
)


def _label(passed: bool) -> str:
    return "PASS" if passed else "FAIL"


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, tuple | list) and len(value) == 2:
        return f"{as_text(value[0])} - {as_text(value[1])}"
    return as_text(value)


def result_rows(result: ValidationResult) -> list[list[str]]:
    head = [result.session_id, result.app_name, result.device_model]
    if not result.rules:
        return [[*head, "", "", "", "", "", _label(result.passed)]]
    return [
        [
            *head,
            outcome.rule_name,
            outcome.field,
            outcome.expected_condition,
            _cell(outcome.expected_value),
            _cell(outcome.actual_value),
            _label(outcome.passed),
        ]
        for outcome in result.rules
    ]


class CsvResultsExporter:
    """Write results as one CSV row per rule outcome."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None

    def write(self, results: Sequence[ValidationResult], stream: TextIO) -> int:
        writer = csv.writer(stream)
        writer.writerow(CSV_COLUMNS)
        rows = 0
        for result in results:
            for row in result_rows(result):
                writer.writerow(row)
                rows += 1
        return rows

    def to_csv(self, results: Sequence[ValidationResult]) -> str:
        buffer = io.StringIO()
        self.write(results, buffer)
        return buffer.getvalue()

    def consume(self, results: Sequence[ValidationResult]) -> None:
        if self.path is None:
            raise ValueError("CsvResultsExporter has no output path")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            rows = self.write(results, handle)
        logger.info("wrote %d result rows to %s", rows, self.path)


__all__ = ["CSV_COLUMNS", "CsvResultsExporter", "result_rows"]
