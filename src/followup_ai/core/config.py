"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from copy import deepcopy
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .models import Priority


def _per_priority(high: Any, medium: Any, low: Any) -> dict[Priority, Any]:
    return {Priority.HIGH: high, Priority.MEDIUM: medium, Priority.LOW: low}


_TIER_DEFAULTS: dict[str, dict[Priority, Any]] = {
    "base_intervals": _per_priority([1, 3, 5, 7], [3, 7, 14, 21], [7, 14, 30, 45]),
    "success_rates": _per_priority(0.8, 0.6, 0.4),
    "min_spacing_days": _per_priority(1, 2, 3),
    "base_follow_ups": _per_priority(5, 4, 3),
}


def _tier_defaults(name: str) -> dict[Priority, Any]:
    return deepcopy(_TIER_DEFAULTS[name])


class SchedulingSettings(BaseModel):
    """Tuning tables for follow-up strategy generation."""

    base_intervals: dict[Priority, list[int]] = Field(
        default_factory=lambda: _tier_defaults("base_intervals"),
        description="Candidate day-intervals between follow-ups per priority",
    )
    success_rates: dict[Priority, float] = Field(
        default_factory=lambda: _tier_defaults("success_rates"),
        description="Prior success rate used when no response data exists",
    )
    min_spacing_days: dict[Priority, int] = Field(
        default_factory=lambda: _tier_defaults("min_spacing_days"),
        description="Minimum days between consecutive follow-ups",
    )
    base_follow_ups: dict[Priority, int] = Field(
        default_factory=lambda: _tier_defaults("base_follow_ups"),
        description="Schedule length before response-rate adjustments",
    )
    max_duration_days: int = Field(
        default=90, ge=1, description="Latest follow-up offset from the sent date"
    )
    learning_rate: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Interval adaptation strength"
    )
    low_response_rate: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Observed rate below which the schedule is shortened",
    )
    min_follow_ups: int = Field(
        default=2, ge=1, description="Floor applied when shortening a schedule"
    )
    interval_penalty: float = Field(
        default=0.1, ge=0.0, description="Success penalty for off-profile intervals"
    )
    tie_tolerance: float = Field(
        default=0.1,
        ge=0.0,
        description="Success-rate gap treated as a tie during ranking",
    )
    min_interval_days: int = Field(
        default=1, ge=1, description="Floor applied to adapted intervals"
    )

    @field_validator(*_TIER_DEFAULTS, mode="before")
    @classmethod
    def _fill_missing_tiers(cls, value: Any, info: ValidationInfo) -> Any:
        """Overlay a partial per-priority table onto the defaults."""
        if not isinstance(value, dict):
            return value
        merged = {
            priority.value: item
            for priority, item in _tier_defaults(info.field_name).items()
        }
        for key, item in value.items():
            merged[Priority(key).value] = item
        return merged

    @field_validator("base_intervals")
    @classmethod
    def _require_positive_intervals(
        cls, value: dict[Priority, list[int]]
    ) -> dict[Priority, list[int]]:
        for priority, intervals in value.items():
            if any(interval < 1 for interval in intervals):
                msg = f"Intervals for '{priority.value}' must be at least one day"
                raise ValueError(msg)
        return value


class AdjusterSettings(BaseModel):
    """Thresholds driving priority suggestions."""

    quick_threshold_hours: float = Field(
        default=24.0, gt=0, description="Responses faster than this are quick"
    )
    delayed_threshold_hours: float = Field(
        default=72.0, gt=0, description="Averages slower than this escalate"
    )
    min_responses_for_pattern: int = Field(
        default=3,
        ge=0,
        description="Responses needed before a pattern can be classified",
    )


class TrackerSettings(BaseModel):
    """Defaults applied to newly tracked emails."""

    initial_response_rate: float | None = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Response rate assumed before any follow-up was sent",
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle key=value structured logging"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    adjuster: AdjusterSettings = Field(default_factory=AdjusterSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_PREFIX = "FOLLOWUP_AI_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _normalize_value(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    if value == "":
        return None
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return value


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values: dict[str, Any] = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values: dict[str, Any] = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    for key, value in {**file_values, **env_values}.items():
        path = _normalize_key(key)
        if not path:
            continue
        _merge_into_tree(collected, path, _normalize_value(value))

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    *,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment=include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "AdjusterSettings",
    "LoggingSettings",
    "SchedulingSettings",
    "TrackerSettings",
    "load_app_settings",
]
