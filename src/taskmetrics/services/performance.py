"""Team and individual performance metrics.

Both calculators share the same status counting and rate logic; the team
version scopes by creation window, the individual version by primary assignee.
"""

import logging
import statistics
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import Task, TaskStatus, TeamMember
from ..utils.datetime import ensure_aware, now_utc, to_iso_string

logger = logging.getLogger(__name__)


@dataclass
class StatusSummary:
    """Counts and rates over a set of tasks."""
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    blocked: int = 0
    completion_rate: float = 0.0
    average_completion_time: float = 0.0  # days
    on_time_completion_rate: float = 0.0
    overdue_count: int = 0


def summarize_tasks(tasks: Iterable[Task], now: datetime) -> StatusSummary:
    """Count tasks by status and derive completion rates.

    Every rate is 0 when its denominator is empty.
    """
    tasks = list(tasks)
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1

    completed = [t for t in tasks if t.is_completed]
    total = len(tasks)

    cycle_times = [t.cycle_time_days for t in completed if t.completed_at is not None]
    on_time = [t for t in completed if t.completed_on_time()]

    return StatusSummary(
        total=total,
        completed=counts[TaskStatus.COMPLETED],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        pending=counts[TaskStatus.PENDING],
        blocked=counts[TaskStatus.BLOCKED],
        completion_rate=(len(completed) / total * 100) if total > 0 else 0.0,
        average_completion_time=statistics.mean(cycle_times) if cycle_times else 0.0,
        on_time_completion_rate=(len(on_time) / len(completed) * 100) if completed else 0.0,
        overdue_count=sum(1 for t in tasks if t.is_overdue(now)),
    )


@dataclass
class TeamPerformanceMetrics:
    """Aggregate performance over a creation-date window"""
    completion_rate: float
    average_completion_time: float  # days
    total_completed: int
    total_in_progress: int
    total_pending: int
    total_blocked: int
    on_time_completion_rate: float
    overdue_count: int
    period_start: datetime
    period_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'completionRate': self.completion_rate,
            'averageCompletionTime': self.average_completion_time,
            'totalCompleted': self.total_completed,
            'totalInProgress': self.total_in_progress,
            'totalPending': self.total_pending,
            'totalBlocked': self.total_blocked,
            'onTimeCompletionRate': self.on_time_completion_rate,
            'overdueCount': self.overdue_count,
            'period': {
                'start': to_iso_string(self.period_start),
                'end': to_iso_string(self.period_end),
            },
        }


@dataclass
class ActivityEntry:
    """Synthetic activity log line derived from a task's last update"""
    task_id: str
    title: str
    performed_by: str
    timestamp: datetime
    type: str = "updated"

    @property
    def id(self) -> str:
        return f"activity-{self.task_id}"

    @property
    def description(self) -> str:
        return f"Updated {self.title}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'taskId': self.task_id,
            'title': self.title,
            'type': self.type,
            'performedBy': self.performed_by,
            'timestamp': to_iso_string(self.timestamp),
            'description': self.description,
        }


@dataclass
class IndividualPerformanceReport:
    """Per-member performance with a relative contribution score"""
    member: TeamMember
    tasks_completed: int
    tasks_in_progress: int
    tasks_pending: int
    tasks_blocked: int
    completion_rate: float
    average_completion_time: float  # days
    on_time_completion_rate: float
    contribution_score: float
    recent_activity: List[ActivityEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'member': self.member.to_dict(),
            'tasksCompleted': self.tasks_completed,
            'tasksInProgress': self.tasks_in_progress,
            'tasksPending': self.tasks_pending,
            'tasksBlocked': self.tasks_blocked,
            'completionRate': self.completion_rate,
            'averageCompletionTime': self.average_completion_time,
            'onTimeCompletionRate': self.on_time_completion_rate,
            'contributionScore': self.contribution_score,
            'recentActivity': [entry.to_dict() for entry in self.recent_activity],
        }


class TeamPerformanceCalculator:
    """Aggregates counts and rates for tasks created inside a date window"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def calculate(self, tasks: Iterable[Task], window_start: datetime, window_end: datetime,
                  now: Optional[datetime] = None) -> TeamPerformanceMetrics:
        """Compute team metrics for tasks with ``created_at`` in [start, end]."""
        now = ensure_aware(now) or now_utc()
        window_start = ensure_aware(window_start)
        window_end = ensure_aware(window_end)

        in_window = [t for t in tasks if window_start <= t.created_at <= window_end]
        logger.debug(f"Team performance over {len(in_window)} tasks "
                     f"({window_start.date()} .. {window_end.date()})")

        summary = summarize_tasks(in_window, now)
        return TeamPerformanceMetrics(
            completion_rate=summary.completion_rate,
            average_completion_time=summary.average_completion_time,
            total_completed=summary.completed,
            total_in_progress=summary.in_progress,
            total_pending=summary.pending,
            total_blocked=summary.blocked,
            on_time_completion_rate=summary.on_time_completion_rate,
            overdue_count=summary.overdue_count,
            period_start=window_start,
            period_end=window_end,
        )


class IndividualReportGenerator:
    """Builds one performance report per team member"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def generate(self, tasks: Iterable[Task], members: Iterable[TeamMember],
                 now: Optional[datetime] = None) -> List[IndividualPerformanceReport]:
        now = ensure_aware(now) or now_utc()
        tasks = list(tasks)

        by_assignee: Dict[str, List[Task]] = {}
        for task in tasks:
            by_assignee.setdefault(task.assignee_id, []).append(task)

        return [
            self._build_report(member, by_assignee.get(member.id, []), now)
            for member in members
        ]

    def _build_report(self, member: TeamMember, member_tasks: List[Task],
                      now: datetime) -> IndividualPerformanceReport:
        summary = summarize_tasks(member_tasks, now)
        return IndividualPerformanceReport(
            member=member,
            tasks_completed=summary.completed,
            tasks_in_progress=summary.in_progress,
            tasks_pending=summary.pending,
            tasks_blocked=summary.blocked,
            completion_rate=summary.completion_rate,
            average_completion_time=summary.average_completion_time,
            on_time_completion_rate=summary.on_time_completion_rate,
            contribution_score=self.contribution_score(summary),
            recent_activity=self._recent_activity(member, member_tasks),
        )

    def contribution_score(self, summary: StatusSummary) -> float:
        """Weighted, unbounded score used only to rank members against each other."""
        cfg = self.config
        score = (
            summary.completed * cfg.completed_task_weight +
            summary.in_progress * cfg.in_progress_task_weight +
            summary.on_time_completion_rate * cfg.on_time_rate_weight
        )
        if summary.completion_rate > cfg.high_completion_threshold:
            score += cfg.high_completion_bonus
        return score

    def _recent_activity(self, member: TeamMember, member_tasks: List[Task]) -> List[ActivityEntry]:
        # sorted() is stable, so equal timestamps keep input order
        ordered = sorted(member_tasks, key=lambda t: t.updated_at, reverse=True)
        return [
            ActivityEntry(
                task_id=task.id,
                title=task.title,
                performed_by=member.name,
                timestamp=task.updated_at,
            )
            for task in ordered[:self.config.recent_activity_limit]
        ]
