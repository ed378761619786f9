from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from benchgate.validation.evaluator import RuleEvaluator
from benchgate.validation.runner import ValidationRunner


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    filters = list(root.filters)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.filters[:] = filters
    root.setLevel(level)


@pytest.fixture
def flat_session() -> dict[str, object]:
    return {
        "id": "sess-flat",
        "appName": "Space Racer",
        "deviceModel": "Pixel 8",
        "manufacturer": "Google",
        "fpsMin": 24,
        "fpsMedian": 59.5,
        "fpsStability": 92,
        "cpuUsageAvg": 45,
        "androidMemUsageAvg": 812,
        "firstBat": 88,
        "lastBat": 71,
        "timePlayed": 600,
        "appLaunchTimeMs": 1350,
        "isCharging": False,
        "timePushed": 1_700_000_000_000,
        "app": {"packageName": "com.example.racer", "version": "2.4.1"},
    }


@pytest.fixture
def evaluator() -> RuleEvaluator:
    return RuleEvaluator()


@pytest.fixture
def runner(evaluator: RuleEvaluator) -> ValidationRunner:
    return ValidationRunner(evaluator)
