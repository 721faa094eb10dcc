"""Generate and rank follow-up schedules for an outbound email."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date
from functools import cmp_to_key

from followup_ai.core.config import SchedulingSettings
from followup_ai.core.datetime_utils import add_days, days_between
from followup_ai.core.interfaces import StrategyGenerator
from followup_ai.core.models import FollowUpConfig, FollowUpStrategy, Priority

LOGGER = logging.getLogger(__name__)

_NEUTRAL_RATE = 0.5
_FLOAT_TOLERANCE = 1e-9

# Intervals that do not fit the cadence of a tier.
_HIGH_MAX_INTERVAL = 7
_LOW_MIN_INTERVAL = 7

# (mean-interval threshold, score) bands, checked in order.
_HIGH_ALIGNMENT = ((5.0, 1.0), (7.0, 0.7))
_LOW_ALIGNMENT = ((14.0, 1.0), (7.0, 0.7))
_MEDIUM_RANGE = (7.0, 14.0)


class AdaptiveStrategyGenerator(StrategyGenerator):
    """Enumerate constrained follow-up date sequences and rank them."""

    def __init__(self, settings: SchedulingSettings | None = None) -> None:
        """Store tuning tables; defaults apply when none are supplied."""
        self._settings = settings or SchedulingSettings()

    @property
    def settings(self) -> SchedulingSettings:
        return self._settings

    def generate_strategies(
        self,
        anchor_date: date,
        config: FollowUpConfig,
        *,
        limit: int | None = None,
    ) -> list[FollowUpStrategy]:
        """Return every schedule that satisfies the constraints, best first.

        An empty list means no schedule of the required length fits inside
        the allowed window; it is not an error.
        """
        candidates = self.adapted_intervals(config)
        depth = self.determine_max_follow_ups(config)
        paths = self._search(anchor_date, candidates, depth, config.priority)

        strategies = [
            FollowUpStrategy(
                dates=dates,
                intervals=intervals,
                priority=config.priority,
                expected_success_rate=self.calculate_expected_success(
                    intervals, config.priority, config.response_rate
                ),
            )
            for dates, intervals in paths
        ]
        LOGGER.debug(
            "Generated %d %s-priority strategies of depth %d from %s",
            len(strategies),
            config.priority.value,
            depth,
            candidates,
        )
        ranked = self.rank_strategies(strategies, config.priority)
        if limit is not None:
            return ranked[: max(limit, 0)]
        return ranked

    def adapted_intervals(self, config: FollowUpConfig) -> list[int]:
        """Return the ascending candidate intervals for ``config``.

        With both a response rate and a last response time on record, each
        base interval is also offered scaled by the observed responsiveness:
        responsive recipients get shorter gaps, unresponsive ones longer.
        """
        base = list(self._settings.base_intervals[config.priority])
        if config.response_rate is None or config.last_response_time is None:
            return sorted(set(base))

        factor = 1 - self._settings.learning_rate * (
            config.response_rate - _NEUTRAL_RATE
        )
        adapted = [
            max(self._settings.min_interval_days, _round_half_up(interval * factor))
            for interval in base
        ]
        return sorted(set(base) | set(adapted))

    def determine_max_follow_ups(self, config: FollowUpConfig) -> int:
        """Return the schedule length for ``config``."""
        base = self._settings.base_follow_ups[config.priority]
        if (
            config.response_rate is not None
            and config.response_rate < self._settings.low_response_rate
        ):
            return max(self._settings.min_follow_ups, base - 1)
        return base

    def calculate_expected_success(
        self,
        intervals: Sequence[int],
        priority: Priority,
        response_rate: float | None = None,
    ) -> float:
        """Predict the success rate of a schedule built from ``intervals``."""
        base = self._settings.success_rates[priority]
        if response_rate is None:
            return base

        weighted = (base + response_rate) / 2
        if any(_is_off_profile(interval, priority) for interval in intervals):
            weighted -= self._settings.interval_penalty
        return max(0.0, min(1.0, weighted))

    def rank_strategies(
        self, strategies: Sequence[FollowUpStrategy], priority: Priority
    ) -> list[FollowUpStrategy]:
        """Order by success rate, breaking near-ties by priority alignment."""
        tolerance = self._settings.tie_tolerance
        scored = [
            (strategy, priority_alignment(strategy, priority))
            for strategy in strategies
        ]

        def compare(
            left: tuple[FollowUpStrategy, float], right: tuple[FollowUpStrategy, float]
        ) -> int:
            diff = right[0].expected_success_rate - left[0].expected_success_rate
            if abs(diff) - tolerance > _FLOAT_TOLERANCE:
                return 1 if diff > 0 else -1
            return _sign(right[1] - left[1])

        return [strategy for strategy, _ in sorted(scored, key=cmp_to_key(compare))]

    def _search(
        self,
        anchor: date,
        candidates: Sequence[int],
        depth: int,
        priority: Priority,
    ) -> list[tuple[tuple[date, ...], tuple[int, ...]]]:
        """Depth-first enumeration of all full-depth paths.

        ``cursors[level]`` holds the next candidate to try at that level;
        exhausting a level resets its cursor and retracts to the parent.
        """
        if depth <= 0 or not candidates:
            return []

        max_duration = self._settings.max_duration_days
        min_spacing = self._settings.min_spacing_days[priority]
        dates: list[date] = [anchor] * depth
        intervals = [0] * depth
        cursors = [0] * depth
        found: list[tuple[tuple[date, ...], tuple[int, ...]]] = []

        level = 0
        while level >= 0:
            if cursors[level] >= len(candidates):
                cursors[level] = 0
                level -= 1
                continue

            interval = candidates[cursors[level]]
            cursors[level] += 1
            previous = dates[level - 1] if level else anchor
            next_date = add_days(previous, interval)

            if days_between(anchor, next_date) > max_duration:
                # candidates ascend, so the rest of this level overshoots too
                cursors[level] = len(candidates)
                continue
            if level and days_between(previous, next_date) < min_spacing:
                continue

            dates[level] = next_date
            intervals[level] = interval
            if level + 1 == depth:
                found.append((tuple(dates), tuple(intervals)))
            else:
                level += 1

        return found


def priority_alignment(strategy: FollowUpStrategy, priority: Priority) -> float:
    """Score how well the schedule's mean interval fits ``priority``."""
    mean = strategy.mean_interval
    if priority == Priority.HIGH:
        for upper, score in _HIGH_ALIGNMENT:
            if mean <= upper:
                return score
        return 0.3
    if priority == Priority.MEDIUM:
        low, high = _MEDIUM_RANGE
        return 1.0 if low <= mean <= high else 0.5
    for lower, score in _LOW_ALIGNMENT:
        if mean >= lower:
            return score
    return 0.3


def _is_off_profile(interval: int, priority: Priority) -> bool:
    if priority == Priority.HIGH:
        return interval > _HIGH_MAX_INTERVAL
    if priority == Priority.LOW:
        return interval < _LOW_MIN_INTERVAL
    return False


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


__all__ = ["AdaptiveStrategyGenerator", "priority_alignment"]
