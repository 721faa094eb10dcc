"""Follow-up strategy search, priority feedback and tracking."""

from followup_ai.core.interfaces import EmailNotFoundError, TrackerError

from .metrics import classify_response_pattern, record_response
from .priority import PriorityAdjuster
from .strategy import AdaptiveStrategyGenerator, priority_alignment
from .tracker import FollowUpTracker

__all__ = [
    "AdaptiveStrategyGenerator",
    "PriorityAdjuster",
    "FollowUpTracker",
    "TrackerError",
    "EmailNotFoundError",
    "classify_response_pattern",
    "record_response",
    "priority_alignment",
]
