"""Command line interface: schedule or estimate a routine file."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from habitstack.core.models import ScheduleResult, TaskTier
from habitstack.core.store import load_routine_file, resolve_routine
from habitstack.monitoring.logging import get_logger
from habitstack.scheduling.budget import TimeBudget
from habitstack.scheduling.estimator import analyze_time_requirements, estimate_duration
from habitstack.scheduling.scheduler import STRATEGIES, get_strategy
from habitstack.scheduling.settings import SchedulerSettings
from habitstack.scheduling.summary import summarize_schedule
from habitstack.scheduling.time_utils import fixed_clock, seconds_since
from habitstack.utils.config import Config, get_config
from habitstack.utils.display import format_duration, relative_time
from habitstack.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

TIER_STYLES = {
    TaskTier.ESSENTIAL: "bold red",
    TaskTier.CORE: "bold yellow",
    TaskTier.OPTIONAL: "cyan",
}


def _parse_now(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid --now timestamp: {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitstack", description="Fit a routine into the time you have.")
    parser.add_argument("--config", help="Path to an alternate config.yaml")
    parser.add_argument("--now", help="Evaluate eligibility at this ISO timestamp instead of the current time")
    subparsers = parser.add_subparsers(dest="command", required=True)

    schedule_parser = subparsers.add_parser("schedule", help="Schedule a routine into a time budget")
    schedule_parser.add_argument("routine", help="YAML routine file")
    schedule_parser.add_argument("--minutes", type=float, required=True, help="Time available, in minutes")
    schedule_parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default="tiered",
        help="tiered (greedy, any size) or optimal (exhaustive, small routines)",
    )
    schedule_parser.add_argument(
        "--buffer",
        action="store_true",
        help="Hold back the configured buffer before scheduling",
    )

    estimate_parser = subparsers.add_parser("estimate", help="Estimate minimum time per tier")
    estimate_parser.add_argument("routine", help="YAML routine file")
    estimate_parser.add_argument(
        "--tier",
        choices=[tier.name.lower() for tier in TaskTier],
        help="Only report this tier and above",
    )
    return parser


def render_schedule(console: Console, result: ScheduleResult, title: str, now: datetime) -> None:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Task")
    table.add_column("Tier")
    table.add_column("Allocated", justify="right")
    table.add_column("Range", justify="right", style="dim")
    table.add_column("Last done", justify="right", style="dim")

    for position, item in enumerate(result.scheduled, start=1):
        task = item.task
        span = format_duration(task.min_duration)
        if task.is_elastic:
            span = f"{span} – {format_duration(task.max_duration)}"
        table.add_row(
            str(position),
            task.name,
            f"[{TIER_STYLES[task.tier]}]{task.tier.label}[/]",
            format_duration(item.allocated_duration),
            span,
            relative_time(seconds_since(task.last_completed, now) if task.last_completed else None),
        )
    console.print(table)


def _cmd_schedule(args: argparse.Namespace, config: Config, console: Console) -> int:
    now = _parse_now(args.now)
    routine, store = load_routine_file(args.routine)
    tasks = resolve_routine(routine, store)
    settings = SchedulerSettings.from_config(config)

    total_time = args.minutes * 60
    available_time = total_time
    if args.buffer:
        essential_time = estimate_duration(tasks, TaskTier.ESSENTIAL, now)
        budget = TimeBudget.from_config(config, total_time, essential_time)
        available_time = budget.available_time
        console.print(
            f"[dim]Buffer {format_duration(budget.effective_buffer)}; "
            f"scheduling into {format_duration(available_time)}[/]"
        )

    requirements = analyze_time_requirements(tasks, available_time, now, settings)
    if requirements.warning:
        console.print(f"[yellow]{requirements.warning}[/]")

    strategy = get_strategy(args.strategy, settings=settings, clock=fixed_clock(now))
    result = strategy.schedule(tasks, available_time)
    if not result.ok:
        console.print(f"[bold red]✗ {result.error.message}[/]")
        return 1

    if not result.scheduled:
        console.print("[yellow]No tasks are due right now.[/]")
        return 0

    render_schedule(console, result, title=f"{routine.name} ({strategy.name})", now=now)
    summary = summarize_schedule(tasks, result.scheduled, available_time)
    console.print(
        f"{summary.scheduled_count}/{summary.total_count} tasks, "
        f"{summary.extended_count} extended, "
        f"{format_duration(summary.total_allocated)} allocated, "
        f"{format_duration(summary.unused_time)} unused"
    )
    return 0


def _cmd_estimate(args: argparse.Namespace, config: Config, console: Console) -> int:
    now = _parse_now(args.now)
    routine, store = load_routine_file(args.routine)
    tasks = resolve_routine(routine, store)

    tiers = sorted(TaskTier, reverse=True)
    if args.tier:
        minimum = TaskTier.parse(args.tier)
        tiers = [tier for tier in tiers if tier >= minimum]

    table = Table(title=f"{routine.name}: minimum time if due tasks run")
    table.add_column("Up to tier")
    table.add_column("Minimum", justify="right")
    for tier in tiers:
        table.add_row(tier.label, format_duration(estimate_duration(tasks, tier, now)))
    console.print(table)
    return 0


COMMANDS = {
    "schedule": _cmd_schedule,
    "estimate": _cmd_estimate,
}


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    try:
        config = get_config(args.config)
        return COMMANDS[args.command](args, config, console)
    except (ConfigurationError, FileNotFoundError, argparse.ArgumentTypeError) as exc:
        logger.error("cli.failed", command=args.command, error=str(exc))
        console.print(f"[bold red]✗ {exc}[/]")
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
