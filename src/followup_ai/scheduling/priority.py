"""Response-driven priority suggestions for tracked emails."""

from __future__ import annotations

import logging

from followup_ai.core.config import AdjusterSettings
from followup_ai.core.interfaces import PriorityAdvisor, PrioritySubject
from followup_ai.core.models import Priority, ResponsePattern

LOGGER = logging.getLogger(__name__)


class PriorityAdjuster(PriorityAdvisor):
    """Suggest one-step priority changes from rolling response times."""

    def __init__(self, settings: AdjusterSettings | None = None) -> None:
        self._settings = settings or AdjusterSettings()

    def adjust_priority(self, email: PrioritySubject) -> Priority:
        """Return the suggested priority; the caller decides whether to apply it."""
        metrics = email.metrics
        current = Priority(email.priority)
        average = metrics.average_response_time
        pattern = metrics.response_pattern

        if (
            average > self._settings.delayed_threshold_hours
            and pattern == ResponsePattern.DELAYED
        ):
            suggested = current.escalate()
        elif (
            average < self._settings.quick_threshold_hours
            and pattern == ResponsePattern.QUICK
        ):
            suggested = current.de_escalate()
        else:
            return current

        if suggested != current:
            LOGGER.debug(
                "Suggesting %s -> %s (average %.1fh, %s)",
                current.value,
                suggested.value,
                average,
                ResponsePattern(pattern).value,
            )
        return suggested


__all__ = ["PriorityAdjuster"]
