from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from benchgate.models.results import ValidationResult


@runtime_checkable
class ResultsConsumer(Protocol):
    def consume(self, results: Sequence[ValidationResult]) -> None: ...


__all__ = ["ResultsConsumer"]
