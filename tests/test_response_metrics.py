"""Tests for response metric bookkeeping."""

from __future__ import annotations

import pytest

from followup_ai.core.config import AdjusterSettings
from followup_ai.core.models import ResponseMetrics, ResponsePattern
from followup_ai.scheduling.metrics import classify_response_pattern, record_response


def _metrics(count: int, average: float) -> ResponseMetrics:
    return ResponseMetrics(
        last_response_time=average,
        average_response_time=average,
        response_count=count,
        total_responses=count,
        response_pattern=ResponsePattern.INCONSISTENT,
    )


def test_running_average_matches_closed_form_mean() -> None:
    metrics = ResponseMetrics()
    expected_averages = [10.0, 20.0, 30.0]

    for response_time, expected in zip([10.0, 30.0, 50.0], expected_averages):
        metrics = record_response(metrics, response_time)
        assert metrics.average_response_time == pytest.approx(expected)

    assert metrics.response_count == 3
    assert metrics.total_responses == 3
    assert metrics.last_response_time == 50.0


def test_record_response_returns_new_instance() -> None:
    original = ResponseMetrics()

    updated = record_response(original, 12.0)

    assert original.response_count == 0
    assert updated.response_count == 1


def test_record_response_rejects_negative_times() -> None:
    with pytest.raises(ValueError):
        record_response(ResponseMetrics(), -1.0)


@pytest.mark.parametrize("response_time", [1.0, 200.0])
def test_pattern_is_inconsistent_with_too_few_responses(response_time: float) -> None:
    metrics = _metrics(count=2, average=5.0)

    assert (
        classify_response_pattern(response_time, metrics)
        is ResponsePattern.INCONSISTENT
    )


@pytest.mark.parametrize(
    ("average", "response_time", "expected"),
    [
        (10.0, 5.0, ResponsePattern.QUICK),
        (100.0, 80.0, ResponsePattern.DELAYED),
        (10.0, 80.0, ResponsePattern.INCONSISTENT),
        (80.0, 10.0, ResponsePattern.INCONSISTENT),
        (30.0, 24.0, ResponsePattern.DELAYED),
    ],
)
def test_pattern_compares_response_with_running_average(
    average: float, response_time: float, expected: ResponsePattern
) -> None:
    metrics = _metrics(count=3, average=average)

    assert classify_response_pattern(response_time, metrics) is expected


def test_pattern_emerges_after_enough_responses() -> None:
    metrics = ResponseMetrics()
    patterns = []
    for _ in range(4):
        metrics = record_response(metrics, 10.0)
        patterns.append(metrics.response_pattern)

    assert patterns == [
        ResponsePattern.INCONSISTENT,
        ResponsePattern.INCONSISTENT,
        ResponsePattern.INCONSISTENT,
        ResponsePattern.QUICK,
    ]


def test_custom_thresholds_are_honoured() -> None:
    settings = AdjusterSettings(quick_threshold_hours=48, min_responses_for_pattern=1)
    metrics = _metrics(count=1, average=40.0)

    assert classify_response_pattern(30.0, metrics, settings) is ResponsePattern.QUICK


def test_response_rate_guards_against_empty_metrics() -> None:
    assert ResponseMetrics().response_rate is None
    assert _metrics(count=4, average=1.0).response_rate == 1.0
