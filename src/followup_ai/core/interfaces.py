"""Protocol interfaces for decoupling components."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from .models import FollowUpConfig, FollowUpStrategy, Priority, ResponseMetrics


class TrackerError(RuntimeError):
    """Raised when a tracked email cannot be created or updated."""


class EmailNotFoundError(TrackerError, KeyError):
    """Raised when an email id is not tracked."""

    def __init__(self, email_id: int) -> None:
        super().__init__(f"Email {email_id} is not tracked")
        self.email_id = email_id

    def __str__(self) -> str:
        return f"Email {self.email_id} is not tracked"


class StrategyGenerator(Protocol):
    """Produces ranked follow-up schedules for an email."""

    def generate_strategies(
        self,
        anchor_date: date,
        config: FollowUpConfig,
        *,
        limit: int | None = None,
    ) -> list[FollowUpStrategy]:
        """Return candidate schedules, highest-ranked first."""
        raise NotImplementedError


class PrioritySubject(Protocol):
    """Snapshot of an email as seen by a priority advisor."""

    @property
    def priority(self) -> Priority:
        """Current priority of the email."""
        raise NotImplementedError

    @property
    def metrics(self) -> ResponseMetrics:
        """Accumulated response statistics."""
        raise NotImplementedError


class PriorityAdvisor(Protocol):
    """Suggests a priority from response behaviour."""

    def adjust_priority(self, email: PrioritySubject) -> Priority:
        """Return the suggested priority for ``email``."""
        raise NotImplementedError


__all__ = [
    "TrackerError",
    "EmailNotFoundError",
    "StrategyGenerator",
    "PrioritySubject",
    "PriorityAdvisor",
]
