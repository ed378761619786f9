from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from benchgate.models.rules import ValidationRule
from benchgate.sessions.client import DEFAULT_BASE_URL
from benchgate.validation.rulesets import default_rules

_ENV_PREFIX = "BENCHGATE_"


class ApiConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    username: str | None = None
    token: str | None = None
    """Personal API token; sent as the Basic auth password."""
    company_id: str | None = None
    timeout_s: float = Field(default=30.0, gt=0)

    # Env overrides are parsed as YAML, so numeric ids and tokens arrive as ints.
    @field_validator("username", "token", "company_id", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value


class ValidationConfig(BaseModel):
    float_tolerance: float = Field(default=0.0, ge=0)
    """Absolute tolerance for ``==`` / ``!=`` on numbers. Zero means exact."""
    chunk_size: int = Field(default=500, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return normalized


class BenchGateSettings(BaseSettings):
    api: ApiConfig = Field(default_factory=ApiConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    rules: list[ValidationRule] = Field(default_factory=default_rules)

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )


def _coerce_env_value(value: str) -> object:
    parsed = yaml.safe_load(value)
    return value if parsed is None else parsed


def _set_nested(mapping: dict[str, object], path: list[str], value: object) -> None:
    current = mapping
    for key in path[:-1]:
        existing = current.get(key)
        if not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing
    current[path[-1]] = value


def _apply_env_overrides(data: dict[str, object]) -> dict[str, object]:
    merged = dict(data)
    for key, raw_value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        path = key[len(_ENV_PREFIX) :].lower().split("__")
        _set_nested(merged, path, _coerce_env_value(raw_value))
    return merged


def load_config(path: str | Path = "config/benchgate.yaml") -> BenchGateSettings:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("config file must contain a top-level mapping")

    raw = loaded.get("benchgate", loaded)
    if not isinstance(raw, dict):
        raise ValueError("benchgate config section must be a mapping")

    merged = _apply_env_overrides(raw)
    return BenchGateSettings.model_validate(merged)


__all__ = [
    "ApiConfig",
    "BenchGateSettings",
    "LoggingConfig",
    "ValidationConfig",
    "load_config",
]
