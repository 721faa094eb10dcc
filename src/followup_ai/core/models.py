"""Core domain models used across the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Priority(str, Enum):
    """Urgency tier of an outbound email."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordinal used for escalation, low < medium < high."""
        return _PRIORITY_ORDER.index(self)

    def escalate(self) -> Priority:
        """Return the next priority up, saturating at high."""
        return _PRIORITY_ORDER[min(self.rank + 1, len(_PRIORITY_ORDER) - 1)]

    def de_escalate(self) -> Priority:
        """Return the next priority down, saturating at low."""
        return _PRIORITY_ORDER[max(self.rank - 1, 0)]


_PRIORITY_ORDER = (Priority.LOW, Priority.MEDIUM, Priority.HIGH)


class ResponsePattern(str, Enum):
    """Classification of recent response latency."""

    QUICK = "quick"
    DELAYED = "delayed"
    INCONSISTENT = "inconsistent"


class EmailStatus(str, Enum):
    """Lifecycle state of a tracked email."""

    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class FollowUpConfig:
    """Inputs for strategy generation, built fresh per invocation."""

    priority: Priority
    response_rate: float | None = None
    last_response_time: float | None = None
    total_follow_ups: int = 0
    successful_follow_ups: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "priority", Priority(self.priority))
        if self.response_rate is not None and not 0.0 <= self.response_rate <= 1.0:
            raise ValueError("response_rate must be within [0, 1]")
        if self.last_response_time is not None and self.last_response_time < 0:
            raise ValueError("last_response_time must be non-negative")
        if self.total_follow_ups < 0 or self.successful_follow_ups < 0:
            raise ValueError("follow-up counters must be non-negative")


@dataclass(frozen=True, slots=True)
class FollowUpStrategy:
    """One candidate follow-up schedule with its predicted success."""

    dates: tuple[date, ...]
    intervals: tuple[int, ...]
    priority: Priority
    expected_success_rate: float

    def __post_init__(self) -> None:
        if len(self.dates) != len(self.intervals):
            raise ValueError("dates and intervals must have the same length")

    @property
    def mean_interval(self) -> float:
        if not self.intervals:
            return 0.0
        return sum(self.intervals) / len(self.intervals)


@dataclass(frozen=True, slots=True)
class ResponseMetrics:
    """Rolling response-time statistics for a single email."""

    last_response_time: float = 0.0
    average_response_time: float = 0.0
    response_count: int = 0
    total_responses: int = 0
    response_pattern: ResponsePattern = ResponsePattern.INCONSISTENT

    @property
    def response_rate(self) -> float | None:
        """Share of counted responses, or ``None`` before any were recorded."""
        if self.total_responses == 0:
            return None
        return self.response_count / self.total_responses


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class EmailRecord:
    """Tracked outbound email together with its active follow-up schedule."""

    id: int
    subject: str
    recipient: str
    sent_date: date
    priority: Priority
    body: str | None = None
    cc: tuple[str, ...] = ()
    strategies: tuple[FollowUpStrategy, ...] = ()
    selected_strategy: FollowUpStrategy | None = None
    status: EmailStatus = EmailStatus.PENDING
    current_follow_up_index: int = 0
    completed_follow_ups: list[date] = field(default_factory=list)
    response_rate: float | None = None
    last_response_time: float | None = None
    total_follow_ups: int = 0
    successful_follow_ups: int = 0
    metrics: ResponseMetrics = field(default_factory=ResponseMetrics)
    suggested_priority: Priority | None = None

    @property
    def next_follow_up_date(self) -> date | None:
        """Date of the next due follow-up, ``None`` once the schedule is done."""
        if self.selected_strategy is None:
            return None
        if self.current_follow_up_index >= len(self.selected_strategy.dates):
            return None
        return self.selected_strategy.dates[self.current_follow_up_index]


__all__ = [
    "Priority",
    "ResponsePattern",
    "EmailStatus",
    "FollowUpConfig",
    "FollowUpStrategy",
    "ResponseMetrics",
    "EmailRecord",
]
