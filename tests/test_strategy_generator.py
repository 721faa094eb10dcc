"""Tests for the adaptive follow-up strategy generator."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from followup_ai.core.config import SchedulingSettings
from followup_ai.core.models import FollowUpConfig, FollowUpStrategy, Priority
from followup_ai.scheduling.strategy import (
    AdaptiveStrategyGenerator,
    priority_alignment,
)

ANCHOR = date(2024, 1, 1)


def _strategy(rate: float, *intervals: int) -> FollowUpStrategy:
    dates = []
    current = ANCHOR
    for interval in intervals:
        current = current + timedelta(days=interval)
        dates.append(current)
    return FollowUpStrategy(
        dates=tuple(dates),
        intervals=tuple(intervals),
        priority=Priority.HIGH,
        expected_success_rate=rate,
    )


def test_high_priority_without_response_data_enumerates_every_path() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.HIGH)

    strategies = generator.generate_strategies(ANCHOR, config)

    assert generator.adapted_intervals(config) == [1, 3, 5, 7]
    assert len(strategies) == 4**5
    bound = date(2024, 3, 31)
    for strategy in strategies:
        assert len(strategy.dates) == len(strategy.intervals) == 5
        assert strategy.priority is Priority.HIGH
        assert strategy.expected_success_rate == pytest.approx(0.8)
        previous = ANCHOR
        for current, interval in zip(strategy.dates, strategy.intervals):
            assert (current - previous).days == interval
            assert current > previous
            assert current <= bound
            previous = current


def test_equal_success_rates_are_ordered_by_alignment() -> None:
    generator = AdaptiveStrategyGenerator()

    strategies = generator.generate_strategies(ANCHOR, FollowUpConfig(Priority.HIGH))

    assert strategies[0].intervals == (1, 1, 1, 1, 1)
    assert strategies[0].dates[0] == date(2024, 1, 2)
    scores = [priority_alignment(strategy, Priority.HIGH) for strategy in strategies]
    assert scores == sorted(scores, reverse=True)


def test_low_priority_paths_stay_inside_ninety_days() -> None:
    generator = AdaptiveStrategyGenerator()

    strategies = generator.generate_strategies(ANCHOR, FollowUpConfig(Priority.LOW))

    intervals = {strategy.intervals for strategy in strategies}
    assert (30, 30, 30) in intervals
    assert all(sum(path) <= 90 for path in intervals)
    assert not any(path[:2] == (45, 45) for path in intervals)
    for strategy in strategies:
        assert len(strategy.dates) == 3
        assert (strategy.dates[-1] - ANCHOR).days <= 90


def test_minimum_spacing_prunes_short_gaps_after_the_first_follow_up() -> None:
    settings = SchedulingSettings(
        base_intervals={
            Priority.HIGH: [1, 3, 5, 7],
            Priority.MEDIUM: [1, 3],
            Priority.LOW: [7, 14, 30, 45],
        },
        base_follow_ups={Priority.HIGH: 5, Priority.MEDIUM: 3, Priority.LOW: 3},
    )
    generator = AdaptiveStrategyGenerator(settings)

    strategies = generator.generate_strategies(ANCHOR, FollowUpConfig(Priority.MEDIUM))

    assert {strategy.intervals for strategy in strategies} == {(1, 3, 3), (3, 3, 3)}


def test_unreachable_depth_returns_empty_list() -> None:
    generator = AdaptiveStrategyGenerator(SchedulingSettings(max_duration_days=5))

    assert generator.generate_strategies(ANCHOR, FollowUpConfig(Priority.LOW)) == []


def test_empty_candidate_pool_returns_empty_list() -> None:
    settings = SchedulingSettings(
        base_intervals={Priority.HIGH: [], Priority.MEDIUM: [3], Priority.LOW: [7]}
    )
    generator = AdaptiveStrategyGenerator(settings)

    assert generator.generate_strategies(ANCHOR, FollowUpConfig(Priority.HIGH)) == []


def test_limit_truncates_ranked_list() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.MEDIUM, response_rate=0.5)

    everything = generator.generate_strategies(ANCHOR, config)
    top = generator.generate_strategies(ANCHOR, config, limit=3)

    assert top == everything[:3]


@pytest.mark.parametrize(
    ("priority", "response_rate", "expected"),
    [
        (Priority.HIGH, None, 5),
        (Priority.MEDIUM, None, 4),
        (Priority.LOW, None, 3),
        (Priority.LOW, 0.2, 2),
        (Priority.HIGH, 0.1, 4),
        (Priority.MEDIUM, 0.0, 3),
        (Priority.MEDIUM, 0.3, 4),
    ],
)
def test_determine_max_follow_ups(
    priority: Priority, response_rate: float | None, expected: int
) -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(priority, response_rate=response_rate)

    assert generator.determine_max_follow_ups(config) == expected


def test_unresponsive_low_priority_schedule_is_shortened() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.LOW, response_rate=0.2)

    strategies = generator.generate_strategies(ANCHOR, config)

    assert strategies
    assert all(len(strategy.dates) == 2 for strategy in strategies)


def test_shortened_schedule_respects_floor() -> None:
    settings = SchedulingSettings(
        base_follow_ups={Priority.HIGH: 5, Priority.MEDIUM: 4, Priority.LOW: 2}
    )
    generator = AdaptiveStrategyGenerator(settings)

    config = FollowUpConfig(Priority.LOW, response_rate=0.1)

    assert generator.determine_max_follow_ups(config) == 2


def test_adapted_intervals_shorten_for_responsive_recipients() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.MEDIUM, response_rate=0.9, last_response_time=5)

    assert generator.adapted_intervals(config) == [3, 7, 13, 14, 20, 21]


def test_adapted_intervals_lengthen_for_unresponsive_recipients() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.LOW, response_rate=0.1, last_response_time=96)

    assert generator.adapted_intervals(config) == [7, 14, 15, 30, 31, 45, 47]


def test_adaptation_requires_response_time() -> None:
    generator = AdaptiveStrategyGenerator()
    config = FollowUpConfig(Priority.MEDIUM, response_rate=0.9)

    assert generator.adapted_intervals(config) == [3, 7, 14, 21]


def test_adapted_intervals_are_floored() -> None:
    settings = SchedulingSettings(
        base_intervals={Priority.HIGH: [1, 3], Priority.MEDIUM: [3], Priority.LOW: [7]},
        learning_rate=1.0,
        min_interval_days=2,
    )
    generator = AdaptiveStrategyGenerator(settings)
    config = FollowUpConfig(Priority.HIGH, response_rate=1.0, last_response_time=1)

    assert generator.adapted_intervals(config) == [1, 2, 3]


def test_expected_success_uses_base_rate_without_response_data() -> None:
    generator = AdaptiveStrategyGenerator()

    assert generator.calculate_expected_success([1, 14], Priority.HIGH) == 0.8
    assert generator.calculate_expected_success([3], Priority.MEDIUM) == 0.6
    assert generator.calculate_expected_success([1], Priority.LOW) == 0.4


def test_expected_success_blends_and_penalises_off_profile_intervals() -> None:
    generator = AdaptiveStrategyGenerator()

    blended = generator.calculate_expected_success([1, 3], Priority.HIGH, 0.6)
    penalised = generator.calculate_expected_success([1, 14], Priority.HIGH, 0.6)
    low = generator.calculate_expected_success([3, 14], Priority.LOW, 0.2)
    medium = generator.calculate_expected_success([1, 45], Priority.MEDIUM, 0.2)

    assert blended == pytest.approx(0.7)
    assert penalised == pytest.approx(0.6)
    assert low == pytest.approx(0.2)
    assert medium == pytest.approx(0.4)


def test_expected_success_is_clamped() -> None:
    generator = AdaptiveStrategyGenerator(SchedulingSettings(interval_penalty=2.0))

    assert generator.calculate_expected_success([1], Priority.LOW, 0.0) == 0.0


def test_near_tie_is_broken_by_priority_alignment() -> None:
    generator = AdaptiveStrategyGenerator()
    slow = _strategy(0.75, 10, 10)
    fast = _strategy(0.70, 2, 2)

    ranked = generator.rank_strategies([slow, fast], Priority.HIGH)

    assert ranked == [fast, slow]


def test_gap_of_exactly_tolerance_counts_as_tie() -> None:
    generator = AdaptiveStrategyGenerator()
    slow = _strategy(0.8, 10, 10)
    fast = _strategy(0.7, 2, 2)

    ranked = generator.rank_strategies([slow, fast], Priority.HIGH)

    assert ranked == [fast, slow]


def test_clear_success_gap_outranks_alignment() -> None:
    generator = AdaptiveStrategyGenerator()
    slow = _strategy(0.9, 10, 10)
    fast = _strategy(0.5, 2, 2)

    ranked = generator.rank_strategies([fast, slow], Priority.HIGH)

    assert ranked == [slow, fast]


@pytest.mark.parametrize(
    ("priority", "intervals", "expected"),
    [
        (Priority.HIGH, (5, 5), 1.0),
        (Priority.HIGH, (7, 7), 0.7),
        (Priority.HIGH, (7, 14), 0.3),
        (Priority.MEDIUM, (7, 14), 1.0),
        (Priority.MEDIUM, (3, 3), 0.5),
        (Priority.MEDIUM, (21, 21), 0.5),
        (Priority.LOW, (14, 14), 1.0),
        (Priority.LOW, (7, 7), 0.7),
        (Priority.LOW, (3, 3), 0.3),
    ],
)
def test_priority_alignment_bands(
    priority: Priority, intervals: tuple[int, ...], expected: float
) -> None:
    assert priority_alignment(_strategy(0.5, *intervals), priority) == expected


def test_config_rejects_out_of_range_response_rate() -> None:
    with pytest.raises(ValueError):
        FollowUpConfig(Priority.HIGH, response_rate=1.5)


def test_strategy_rejects_mismatched_dates_and_intervals() -> None:
    with pytest.raises(ValueError):
        FollowUpStrategy(
            dates=(date(2024, 1, 2), date(2024, 1, 5)),
            intervals=(1,),
            priority=Priority.HIGH,
            expected_success_rate=0.8,
        )
