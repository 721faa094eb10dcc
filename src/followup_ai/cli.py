"""Command-line entry point for Follow-up AI."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from followup_ai.core import AppSettings, configure_logging, load_app_settings
from followup_ai.core.datetime_utils import display_date, parse_date
from followup_ai.core.models import (
    FollowUpConfig,
    FollowUpStrategy,
    Priority,
    ResponseMetrics,
)
from followup_ai.scheduling import (
    AdaptiveStrategyGenerator,
    PriorityAdjuster,
    record_response,
)

_PRIORITY_CHOICES = [priority.value for priority in Priority]


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Adaptive email follow-up planner")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "plan", "suggest"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "--priority",
        choices=_PRIORITY_CHOICES,
        default=Priority.MEDIUM.value,
        help="Priority of the email (default: medium).",
    )
    parser.add_argument(
        "--sent-date",
        dest="sent_date",
        default=None,
        help="Date the email was sent, YYYY-MM-DD (plan only).",
    )
    parser.add_argument(
        "--response-rate",
        dest="response_rate",
        type=float,
        default=None,
        help="Observed response rate between 0 and 1 (plan only).",
    )
    parser.add_argument(
        "--last-response-time",
        dest="last_response_time",
        type=float,
        default=None,
        help="Hours the recipient took to answer last time (plan only).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of strategies to show; set to 0 for all (default: 5).",
    )
    parser.add_argument(
        "--response-times",
        dest="response_times",
        type=float,
        nargs="+",
        default=[],
        help="Observed response times in hours, oldest first (suggest only).",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> None:
    """Execute the requested CLI command."""
    command = args.command
    if command == "info":
        _run_info(settings)
    elif command == "plan":
        _run_plan(
            settings,
            priority=Priority(args.priority),
            sent_date=args.sent_date,
            response_rate=args.response_rate,
            last_response_time=args.last_response_time,
            limit=args.limit,
        )
    elif command == "suggest":
        _run_suggest(
            settings,
            priority=Priority(args.priority),
            response_times=args.response_times,
        )


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    execute(args, settings)


def _run_info(settings: AppSettings) -> None:
    scheduling = settings.scheduling
    print("Follow-up AI is ready. Use 'plan' or 'suggest' to get started.")
    print(f"Planning window: {scheduling.max_duration_days} days")
    for priority in Priority:
        intervals = scheduling.base_intervals[priority]
        print(
            f"{priority.value:<6}  intervals={intervals}  "
            f"follow-ups={scheduling.base_follow_ups[priority]}  "
            f"min-spacing={scheduling.min_spacing_days[priority]}d"
        )


def _run_plan(
    settings: AppSettings,
    *,
    priority: Priority,
    sent_date: str | None,
    response_rate: float | None,
    last_response_time: float | None,
    limit: int,
) -> None:
    """Generate ranked schedules and print the best ones."""
    if not sent_date:
        print("Plan failed: --sent-date is required.")
        return
    try:
        anchor = parse_date(sent_date)
        config = FollowUpConfig(
            priority,
            response_rate=response_rate,
            last_response_time=last_response_time,
        )
    except ValueError as exc:
        print(f"Plan failed: {exc}")
        return

    generator = AdaptiveStrategyGenerator(settings.scheduling)
    strategies = generator.generate_strategies(anchor, config)
    if not strategies:
        print("No follow-up schedule fits the configured constraints.")
        return

    shown = strategies if limit <= 0 else strategies[:limit]
    print(
        f"Showing {len(shown)} of {len(strategies)} schedule(s) "
        f"for a {priority.value}-priority email sent {display_date(anchor)}:"
    )
    header = f"{'#':>3}  {'Success':>7}  {'Intervals':<20}  Dates"
    print(header)
    print("-" * len(header))
    for rank, strategy in enumerate(shown, start=1):
        print(_format_strategy(rank, strategy))


def _run_suggest(
    settings: AppSettings,
    *,
    priority: Priority,
    response_times: list[float],
) -> None:
    """Fold response times into metrics and print the suggested priority."""
    metrics = ResponseMetrics()
    try:
        for response_time in response_times:
            metrics = record_response(metrics, response_time, settings.adjuster)
    except ValueError as exc:
        print(f"Suggest failed: {exc}")
        return

    adjuster = PriorityAdjuster(settings.adjuster)
    suggested = adjuster.adjust_priority(_Snapshot(priority, metrics))
    print(f"Responses: {metrics.response_count}")
    print(f"Average response time: {metrics.average_response_time:.1f}h")
    print(f"Pattern: {metrics.response_pattern.value}")
    if suggested == priority:
        print(f"Priority unchanged: {priority.value}")
    else:
        print(f"Suggested priority: {priority.value} -> {suggested.value}")


@dataclass(frozen=True, slots=True)
class _Snapshot:
    """Minimal email view accepted by the priority adjuster."""

    priority: Priority
    metrics: ResponseMetrics


def _format_strategy(rank: int, strategy: FollowUpStrategy) -> str:
    intervals = ",".join(str(interval) for interval in strategy.intervals)
    dates = " ".join(value.isoformat() for value in strategy.dates)
    rate = strategy.expected_success_rate
    return f"{rank:>3}  {rate:>7.2f}  {intervals:<20}  {dates}"


if __name__ == "__main__":
    main()
