"""Project health assessment over a whole task snapshot.

Produces progress, status/priority distributions, deadline pressure, a tiered
risk level and a naive linear completion projection.
"""

import logging
import statistics
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import Priority, Task, TaskStatus
from ..utils.datetime import add_days, ensure_aware, now_utc, to_iso_string

logger = logging.getLogger(__name__)


class VelocityTrend(Enum):
    """Coarse velocity direction derived from overall progress"""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class RiskLevel(Enum):
    """Risk assessment levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ProjectHealthMetrics:
    """Whole-dataset health snapshot"""
    overall_progress: float  # percentage
    velocity_trend: VelocityTrend
    risk_level: RiskLevel
    status_distribution: Dict[TaskStatus, int]
    priority_distribution: Dict[Priority, int]
    upcoming_deadlines: int
    overdue_actions: int
    blockers_count: int
    average_cycle_time: float  # days
    predicted_completion_date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overallProgress': self.overall_progress,
            'velocityTrend': self.velocity_trend.value,
            'riskLevel': self.risk_level.value,
            'statusDistribution': {s.value: n for s, n in self.status_distribution.items()},
            'priorityDistribution': {p.value: n for p, n in self.priority_distribution.items()},
            'upcomingDeadlines': self.upcoming_deadlines,
            'overdueActions': self.overdue_actions,
            'blockersCount': self.blockers_count,
            'averageCycleTime': self.average_cycle_time,
            'predictedCompletionDate': to_iso_string(self.predicted_completion_date),
        }


class ProjectHealthAssessor:
    """Assesses the health of the whole task snapshot (no time window)"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def assess(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> ProjectHealthMetrics:
        now = ensure_aware(now) or now_utc()
        tasks = list(tasks)
        total = len(tasks)

        status_distribution = {status: 0 for status in TaskStatus}
        priority_distribution = {priority: 0 for priority in Priority}
        for task in tasks:
            status_distribution[task.status] += 1
            priority_distribution[task.priority] += 1

        completed = status_distribution[TaskStatus.COMPLETED]
        overall_progress = (completed / total * 100) if total > 0 else 0.0

        horizon = add_days(now, self.config.upcoming_deadline_days)
        open_tasks = [t for t in tasks if not t.is_completed and t.due_date is not None]
        upcoming_deadlines = sum(1 for t in open_tasks if now <= t.due_date <= horizon)
        overdue_actions = sum(1 for t in open_tasks if t.due_date < now)
        blockers_count = status_distribution[TaskStatus.BLOCKED]

        cycle_times = [
            t.cycle_time_days for t in tasks
            if t.is_completed and t.completed_at is not None
        ]
        average_cycle_time = statistics.mean(cycle_times) if cycle_times else 0.0

        outstanding = status_distribution[TaskStatus.PENDING] + status_distribution[TaskStatus.IN_PROGRESS]
        predicted_completion_date = add_days(now, outstanding * average_cycle_time)

        risk_level = self.risk_level(overdue_actions, blockers_count)
        logger.debug(f"Health: progress={overall_progress:.1f}% overdue={overdue_actions} "
                     f"blocked={blockers_count} risk={risk_level.value}")

        return ProjectHealthMetrics(
            overall_progress=overall_progress,
            velocity_trend=self.velocity_trend(overall_progress),
            risk_level=risk_level,
            status_distribution=status_distribution,
            priority_distribution=priority_distribution,
            upcoming_deadlines=upcoming_deadlines,
            overdue_actions=overdue_actions,
            blockers_count=blockers_count,
            average_cycle_time=average_cycle_time,
            predicted_completion_date=predicted_completion_date,
        )

    def velocity_trend(self, overall_progress: float) -> VelocityTrend:
        """Business heuristic on progress alone, not on historical velocity."""
        if overall_progress > self.config.velocity_increasing_threshold:
            return VelocityTrend.INCREASING
        if overall_progress > self.config.velocity_stable_threshold:
            return VelocityTrend.STABLE
        return VelocityTrend.DECREASING

    def risk_level(self, overdue_actions: int, blockers_count: int) -> RiskLevel:
        cfg = self.config
        if overdue_actions > cfg.critical_overdue_threshold or blockers_count > cfg.critical_blocker_threshold:
            return RiskLevel.CRITICAL
        if overdue_actions > cfg.high_overdue_threshold or blockers_count > cfg.high_blocker_threshold:
            return RiskLevel.HIGH
        if overdue_actions > cfg.medium_overdue_threshold or blockers_count > cfg.medium_blocker_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW
