"""CLI Analytics Commands for Task Metrics.

Every command loads a task snapshot file (JSON or YAML), runs one calculator
against it and prints the result as a rich table, a plain grid or JSON.
"""

import functools
import json
import logging
import sys
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import click
import tabulate
from rich.console import Console
from rich.table import Table

from ..config import load_config
from ..domain import TaskDataset
from ..exceptions import TaskMetricsError
from ..services import AnalyticsEngine, Granularity
from ..utils.datetime import ensure_aware, now_utc, parse_datetime

OUTPUT_FORMATS = ['text', 'plain', 'json']


def _parse_timestamp(ctx, param, value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an ISO-8601 timestamp")


def format_metric(value: float, unit: str = "", format_spec: str = ".1f") -> str:
    """Format a metric value with proper units"""
    formatted = f"{value:{format_spec}}"
    return f"{formatted}{unit}" if unit else formatted


def format_table(data: List[Dict], tablefmt: str = "grid") -> str:
    """Format rows as a plain-text table"""
    if not data:
        return "No data available"
    return tabulate.tabulate(data, headers="keys", tablefmt=tablefmt)


def render(payload: Any, rows: List[Dict[str, Any]], title: str, output_format: str) -> None:
    """Print a result in the requested format."""
    if output_format == 'json':
        click.echo(json.dumps(payload, indent=2))
        return

    if output_format == 'plain':
        click.echo(title)
        click.echo(format_table(rows))
        return

    console = Console()
    if not rows:
        console.print(f"[yellow]{title}: no data available[/yellow]")
        return
    table = Table(title=title, show_header=True, header_style="bold blue")
    for column in rows[0].keys():
        table.add_column(str(column))
    for row in rows:
        table.add_row(*(str(value) for value in row.values()))
    console.print(table)


def snapshot_command(func: Callable) -> Callable:
    """Shared DATASET argument, --now and --format options plus error handling."""

    @click.argument('dataset_path', metavar='DATASET', type=click.Path(exists=True, dir_okay=False))
    @click.option('--now', 'now', callback=_parse_timestamp,
                  help='Reference time (ISO-8601); defaults to the current UTC time')
    @click.option('--format', '-f', 'output_format', type=click.Choice(OUTPUT_FORMATS),
                  default='text', help='Output format')
    @click.pass_context
    @functools.wraps(func)
    def wrapper(ctx, dataset_path: str, now: Optional[datetime], output_format: str, **kwargs):
        config = ctx.obj['config'] if ctx.obj else load_config()
        clock = (lambda: now) if now is not None else now_utc
        engine = AnalyticsEngine(config, clock=clock)
        try:
            dataset = TaskDataset.load(dataset_path)
            func(engine, dataset, output_format, **kwargs)
        except TaskMetricsError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return wrapper


def window_options(func: Callable) -> Callable:
    func = click.option('--end', callback=_parse_timestamp,
                        help='Window end (ISO-8601); defaults to now')(func)
    func = click.option('--start', callback=_parse_timestamp,
                        help='Window start (ISO-8601); defaults to 30 days before the end')(func)
    return func


def _resolve_window(engine: AnalyticsEngine, start: Optional[datetime],
                    end: Optional[datetime]):
    end = ensure_aware(end) or engine.now()
    start = ensure_aware(start) or end - timedelta(days=30)
    return start, end


@click.group(name='taskmetrics')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='YAML file overriding analytics thresholds and weights')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def analytics_cli(ctx, config_path: Optional[str], verbose: bool):
    """Analytics and forecasting reports over a task snapshot"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(config_path)
    except TaskMetricsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@analytics_cli.command(name='team')
@snapshot_command
@window_options
def team_command(engine, dataset, output_format, start, end):
    """Team performance for tasks created in a window"""
    start, end = _resolve_window(engine, start, end)
    metrics = engine.team_performance(dataset, start, end)
    rows = [
        {"Metric": "Completion Rate", "Value": format_metric(metrics.completion_rate, "%")},
        {"Metric": "On-Time Completion", "Value": format_metric(metrics.on_time_completion_rate, "%")},
        {"Metric": "Avg Completion Time", "Value": format_metric(metrics.average_completion_time, " days")},
        {"Metric": "Completed", "Value": metrics.total_completed},
        {"Metric": "In Progress", "Value": metrics.total_in_progress},
        {"Metric": "Pending", "Value": metrics.total_pending},
        {"Metric": "Blocked", "Value": metrics.total_blocked},
        {"Metric": "Overdue", "Value": metrics.overdue_count},
    ]
    render(metrics.to_dict(), rows, f"Team Performance {start.date()} - {end.date()}", output_format)


@analytics_cli.command(name='members')
@snapshot_command
def members_command(engine, dataset, output_format):
    """Individual performance reports ranked by contribution score"""
    reports = engine.individual_reports(dataset)
    ranked = sorted(reports, key=lambda r: r.contribution_score, reverse=True)
    rows = [
        {
            "Member": r.member.name,
            "Completed": r.tasks_completed,
            "In Progress": r.tasks_in_progress,
            "Pending": r.tasks_pending,
            "Blocked": r.tasks_blocked,
            "Completion": format_metric(r.completion_rate, "%"),
            "On Time": format_metric(r.on_time_completion_rate, "%"),
            "Score": format_metric(r.contribution_score),
        }
        for r in ranked
    ]
    render([r.to_dict() for r in reports], rows, "Individual Performance", output_format)


@analytics_cli.command(name='health')
@snapshot_command
def health_command(engine, dataset, output_format):
    """Project health snapshot"""
    health = engine.project_health(dataset)
    rows = [
        {"Metric": "Overall Progress", "Value": format_metric(health.overall_progress, "%")},
        {"Metric": "Velocity Trend", "Value": health.velocity_trend.value},
        {"Metric": "Risk Level", "Value": health.risk_level.value},
        {"Metric": "Upcoming Deadlines", "Value": health.upcoming_deadlines},
        {"Metric": "Overdue", "Value": health.overdue_actions},
        {"Metric": "Blocked", "Value": health.blockers_count},
        {"Metric": "Avg Cycle Time", "Value": format_metric(health.average_cycle_time, " days")},
        {"Metric": "Predicted Completion", "Value": health.predicted_completion_date.date().isoformat()},
    ]
    render(health.to_dict(), rows, "Project Health", output_format)


@analytics_cli.command(name='bottlenecks')
@snapshot_command
def bottlenecks_command(engine, dataset, output_format):
    """Tasks stuck in one status, highest risk first"""
    bottlenecks = engine.bottlenecks(dataset)
    rows = [
        {
            "Task": b.title,
            "Status": b.current_status.value,
            "Days": b.days_in_status,
            "Risk": b.risk_score,
            "Factors": "; ".join(b.blocking_factors),
        }
        for b in bottlenecks
    ]
    render([b.to_dict() for b in bottlenecks], rows, "Bottlenecks", output_format)


@analytics_cli.command(name='trends')
@snapshot_command
@click.option('--granularity', '-g', type=click.Choice([g.value for g in Granularity]),
              default=Granularity.MONTHLY.value, help='Bucket size')
def trends_command(engine, dataset, output_format, granularity):
    """Completed tasks per period"""
    trend = engine.completion_trend(dataset, Granularity(granularity))
    rows = [
        {
            "Period": point.label,
            "Completed": point.value,
            "Change": "-" if point.change is None else format_metric(point.change, "%"),
        }
        for point in trend.data
    ]
    title = (f"Completion Trend ({trend.period.value}), "
             f"{format_metric(trend.percentage_change, '%')} vs previous period")
    render(trend.to_dict(), rows, title, output_format)


@analytics_cli.command(name='cycle-time')
@snapshot_command
def cycle_time_command(engine, dataset, output_format):
    """Cycle time statistics"""
    metrics = engine.cycle_time(dataset)
    rows = [
        {"Metric": "Average", "Value": format_metric(metrics.average_cycle_time, " days")},
        {"Metric": "Median", "Value": format_metric(metrics.median, " days")},
        {"Metric": "90th Percentile", "Value": format_metric(metrics.percentile90, " days")},
    ]
    rows.extend(
        {"Metric": f"{priority.value.title()} priority", "Value": format_metric(days, " days")}
        for priority, days in metrics.by_priority.items()
    )
    render(metrics.to_dict(), rows, "Cycle Time", output_format)


@analytics_cli.command(name='forecast')
@snapshot_command
def forecast_command(engine, dataset, output_format):
    """Estimated completion dates for open tasks"""
    forecasts = engine.forecasts(dataset)
    rows = [
        {
            "Task": f.title,
            "Status": f.current_status.value,
            "Estimated": f.estimated_completion_date.date().isoformat(),
            "Days": f.days_remaining,
            "Confidence": f.confidence.value,
            "Risks": "; ".join(f.risk_factors),
        }
        for f in forecasts
    ]
    render([f.to_dict() for f in forecasts], rows, "Forecasts", output_format)


@analytics_cli.command(name='dashboard')
@snapshot_command
def dashboard_command(engine, dataset, output_format):
    """Headline dashboard numbers"""
    stats = engine.dashboard_stats(dataset)
    rows = [{"Metric": key, "Value": value} for key, value in stats.to_dict().items()]
    render(stats.to_dict(), rows, "Dashboard", output_format)


@analytics_cli.command(name='workload')
@snapshot_command
def workload_command(engine, dataset, output_format):
    """Task counts per team member"""
    stats = engine.workload_statistics(dataset)
    rows = [
        {
            "Member": w.member.name,
            "Done": w.done,
            "Active": w.active,
            "Pending": w.pending,
            "Blocked": w.blocked,
            "Total": w.total,
        }
        for w in stats.members
    ]
    title = (f"Workload: {stats.total_tasks} tasks across {stats.total_members} members, "
             f"{stats.completion_rate}% done")
    render(stats.to_dict(), rows, title, output_format)


@analytics_cli.command(name='report')
@snapshot_command
@window_options
def report_command(engine, dataset, output_format, start, end):
    """Combined team, individual, health and bottleneck report"""
    start, end = _resolve_window(engine, start, end)
    report = engine.performance_report(dataset, start, end)
    team = report.team_performance
    health = report.project_health
    rows = [
        {"Metric": "Completion Rate", "Value": format_metric(team.completion_rate, "%")},
        {"Metric": "On-Time Completion", "Value": format_metric(team.on_time_completion_rate, "%")},
        {"Metric": "Overall Progress", "Value": format_metric(health.overall_progress, "%")},
        {"Metric": "Risk Level", "Value": health.risk_level.value},
        {"Metric": "Members", "Value": len(report.individual_reports)},
        {"Metric": "Bottlenecks", "Value": len(report.bottlenecks)},
    ]
    render(report.to_dict(), rows, "Performance Report", output_format)
