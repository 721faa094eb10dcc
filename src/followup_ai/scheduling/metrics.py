"""Rolling response-time statistics for tracked emails."""

from __future__ import annotations

import logging
from dataclasses import replace

from followup_ai.core.config import AdjusterSettings
from followup_ai.core.models import ResponseMetrics, ResponsePattern

LOGGER = logging.getLogger(__name__)

_DEFAULT_SETTINGS = AdjusterSettings()


def classify_response_pattern(
    response_time: float,
    metrics: ResponseMetrics,
    settings: AdjusterSettings | None = None,
) -> ResponsePattern:
    """Classify a new response against the statistics recorded before it.

    Until enough responses exist the pattern stays inconsistent. Afterwards
    the response is quick or delayed when it agrees with the running average,
    and inconsistent when the two disagree.
    """
    settings = settings or _DEFAULT_SETTINGS
    if metrics.response_count < settings.min_responses_for_pattern:
        return ResponsePattern.INCONSISTENT
    is_quick = response_time < settings.quick_threshold_hours
    was_quick = metrics.average_response_time < settings.quick_threshold_hours
    if is_quick != was_quick:
        return ResponsePattern.INCONSISTENT
    return ResponsePattern.QUICK if is_quick else ResponsePattern.DELAYED


def record_response(
    metrics: ResponseMetrics,
    response_time: float,
    settings: AdjusterSettings | None = None,
) -> ResponseMetrics:
    """Return ``metrics`` with one more response of ``response_time`` hours."""
    if response_time < 0:
        raise ValueError("response_time must be non-negative")
    count = metrics.response_count
    average = (metrics.average_response_time * count + response_time) / (count + 1)
    pattern = classify_response_pattern(response_time, metrics, settings)
    LOGGER.debug(
        "Recorded %.1fh response; average %.1fh over %d, pattern %s",
        response_time,
        average,
        count + 1,
        pattern.value,
    )
    return replace(
        metrics,
        last_response_time=response_time,
        average_response_time=average,
        response_count=count + 1,
        total_responses=metrics.total_responses + 1,
        response_pattern=pattern,
    )


__all__ = ["classify_response_pattern", "record_response"]
