"""Value coercion shared by rule validation and rule evaluation.

Every helper returns ``None`` when a value cannot be coerced instead of
raising, so callers decide whether that is a configuration error or a
failed check.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

_EPOCH_DIGITS = re.compile(r"-?[0-9]+")


def as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def as_text(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, sort_keys=True, default=str)
    if value is None:
        return ""
    return str(value)


def as_timestamp(value: object) -> datetime | None:
    """Parse *value* into an aware UTC datetime.

    Numbers and all-digit strings are epoch milliseconds, other strings are
    ISO-8601. Naive datetimes are taken to be UTC.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, int):
        return _from_epoch_ms(_int_to_float(value))
    if isinstance(value, float):
        return _from_epoch_ms(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if _EPOCH_DIGITS.fullmatch(stripped):
            return _from_epoch_ms(float(stripped))
        try:
            parsed = datetime.fromisoformat(stripped)
        except ValueError:
            return None
        return as_timestamp(parsed)
    return None


def as_pair(value: object) -> tuple[object, object] | None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return None
    if len(value) != 2:
        return None
    return (value[0], value[1])


def _int_to_float(value: int) -> float:
    # Ints wider than a double saturate instead of raising OverflowError.
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _from_epoch_ms(millis: float) -> datetime | None:
    if math.isnan(millis) or math.isinf(millis):
        return None
    try:
        return datetime.fromtimestamp(millis / 1000.0, UTC)
    except (OverflowError, OSError, ValueError):
        return None


__all__ = ["as_number", "as_pair", "as_text", "as_timestamp"]
