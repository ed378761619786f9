from __future__ import annotations

from enum import StrEnum
from typing import Final


class ValueKind(StrEnum):
    number = "number"
    string = "string"
    boolean = "boolean"
    date = "date"


class Missing:
    """Sentinel for a field path that does not resolve to a value."""

    _instance: Missing | None = None

    def __new__(cls) -> Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Final = Missing()


def is_missing(value: object) -> bool:
    return value is MISSING


__all__ = ["MISSING", "Missing", "ValueKind", "is_missing"]
