"""In-memory owner of tracked emails and their follow-up lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from followup_ai.core.config import AdjusterSettings, TrackerSettings
from followup_ai.core.datetime_utils import parse_date
from followup_ai.core.interfaces import (
    EmailNotFoundError,
    PriorityAdvisor,
    StrategyGenerator,
    TrackerError,
)
from followup_ai.core.models import (
    EmailRecord,
    EmailStatus,
    FollowUpConfig,
    FollowUpStrategy,
    Priority,
)

from .metrics import record_response

LOGGER = logging.getLogger(__name__)


class FollowUpTracker:
    """Create, advance and re-plan follow-up schedules for outbound emails.

    The tracker is the single writer for its records. Strategy generation and
    priority suggestions are delegated; suggestions are stored on the record
    and only take effect through :meth:`change_priority` or
    :meth:`apply_suggestion`.
    """

    def __init__(
        self,
        generator: StrategyGenerator,
        adjuster: PriorityAdvisor,
        settings: TrackerSettings | None = None,
        *,
        adjuster_settings: AdjusterSettings | None = None,
    ) -> None:
        self._generator = generator
        self._adjuster = adjuster
        self._settings = settings or TrackerSettings()
        self._adjuster_settings = adjuster_settings or AdjusterSettings()
        self._emails: dict[int, EmailRecord] = {}
        self._next_id = 1

    def add_email(
        self,
        subject: str,
        recipient: str,
        sent_date: date | str,
        priority: Priority | str = Priority.MEDIUM,
        *,
        body: str | None = None,
        cc: Iterable[str] = (),
    ) -> EmailRecord:
        """Track a new email and plan its follow-ups immediately."""
        subject = subject.strip()
        recipient = recipient.strip()
        if not subject or not recipient:
            raise TrackerError("Subject and recipient are required")

        anchor = parse_date(sent_date)
        level = Priority(priority)
        response_rate = self._settings.initial_response_rate
        strategies = self._plan(
            anchor, FollowUpConfig(level, response_rate=response_rate)
        )

        record = EmailRecord(
            id=self._next_id,
            subject=subject,
            recipient=recipient,
            sent_date=anchor,
            priority=level,
            body=body,
            cc=tuple(cc),
            strategies=strategies,
            selected_strategy=strategies[0] if strategies else None,
            response_rate=response_rate,
        )
        record.status = _status_for(record, record.selected_strategy)
        self._emails[record.id] = record
        self._next_id += 1
        LOGGER.info(
            "Tracking email %s (%s priority) with %d candidate schedules",
            record.id,
            level.value,
            len(strategies),
        )
        return record

    def get_email(self, email_id: int) -> EmailRecord:
        try:
            return self._emails[email_id]
        except KeyError:
            raise EmailNotFoundError(email_id) from None

    def list_emails(self) -> list[EmailRecord]:
        return list(self._emails.values())

    def delete_email(self, email_id: int) -> bool:
        """Stop tracking an email. Returns ``True`` if it was tracked."""
        removed = self._emails.pop(email_id, None)
        if removed is not None:
            LOGGER.info("Stopped tracking email %s", email_id)
        return removed is not None

    def acknowledge_follow_up(self, email_id: int) -> EmailRecord:
        """Mark the currently due follow-up of an email as sent."""
        record = self.get_email(email_id)
        strategy = record.selected_strategy
        due = record.next_follow_up_date
        if strategy is None or due is None:
            LOGGER.info("Email %s has no remaining follow-ups", email_id)
            return record

        record.completed_follow_ups.append(due)
        record.current_follow_up_index += 1
        record.total_follow_ups += 1
        record.status = _status_for(record, strategy)
        LOGGER.debug(
            "Email %s follow-up %d/%d sent",
            email_id,
            record.current_follow_up_index,
            len(strategy.dates),
        )
        return record

    def record_response(
        self, email_id: int, response_time_hours: float
    ) -> EmailRecord:
        """Fold a recipient response into the metrics and refresh the suggestion."""
        record = self.get_email(email_id)
        record.metrics = record_response(
            record.metrics, response_time_hours, self._adjuster_settings
        )
        record.last_response_time = response_time_hours
        if record.successful_follow_ups < record.total_follow_ups:
            record.successful_follow_ups += 1
        if record.total_follow_ups:
            record.response_rate = (
                record.successful_follow_ups / record.total_follow_ups
            )
        record.suggested_priority = self._adjuster.adjust_priority(record)
        return record

    def change_priority(self, email_id: int, priority: Priority | str) -> EmailRecord:
        """Apply a priority and re-plan the schedule from the sent date."""
        record = self.get_email(email_id)
        level = Priority(priority)
        config = FollowUpConfig(
            level,
            response_rate=record.response_rate,
            last_response_time=record.last_response_time,
            total_follow_ups=record.total_follow_ups,
            successful_follow_ups=record.successful_follow_ups,
        )
        strategies = self._plan(record.sent_date, config)

        record.priority = level
        record.strategies = strategies
        record.selected_strategy = strategies[0] if strategies else None
        record.status = _status_for(record, record.selected_strategy)
        record.suggested_priority = self._adjuster.adjust_priority(record)
        LOGGER.info("Email %s re-planned at %s priority", email_id, level.value)
        return record

    def apply_suggestion(self, email_id: int) -> EmailRecord:
        """Adopt the stored priority suggestion when it differs from the current one."""
        record = self.get_email(email_id)
        suggested = record.suggested_priority
        if suggested is None or suggested == record.priority:
            return record
        return self.change_priority(email_id, suggested)

    def due_follow_ups(self, today: date) -> list[EmailRecord]:
        """Return pending emails whose next follow-up falls on or before ``today``."""
        due = [
            record
            for record in self._emails.values()
            if record.status is EmailStatus.PENDING
            and record.next_follow_up_date is not None
            and record.next_follow_up_date <= today
        ]
        return sorted(due, key=lambda record: (record.next_follow_up_date, record.id))

    def _plan(
        self, anchor: date, config: FollowUpConfig
    ) -> tuple[FollowUpStrategy, ...]:
        strategies = tuple(self._generator.generate_strategies(anchor, config))
        if not strategies:
            LOGGER.warning(
                "No follow-up schedule fits %s priority from %s",
                config.priority.value,
                anchor.isoformat(),
            )
        return strategies


def _status_for(
    record: EmailRecord, strategy: FollowUpStrategy | None
) -> EmailStatus:
    scheduled = len(strategy.dates) if strategy is not None else 0
    if record.current_follow_up_index >= scheduled:
        return EmailStatus.COMPLETED
    return EmailStatus.PENDING


__all__ = ["FollowUpTracker"]
