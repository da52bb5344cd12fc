"""Per-task completion forecasts driven by cycle time statistics."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import Task, TaskStatus
from ..utils.datetime import SECONDS_PER_DAY, add_days, ensure_aware, now_utc, to_iso_string
from .cycle_time import CycleTimeAnalyzer, CycleTimeMetrics

logger = logging.getLogger(__name__)


class ConfidenceLevel(Enum):
    """Coarse reliability label of a forecast"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class ForecastData:
    """Estimated completion of one open task"""
    task_id: str
    title: str
    current_status: TaskStatus
    estimated_completion_date: datetime
    confidence: ConfidenceLevel
    days_remaining: int
    factors_considered: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'taskId': self.task_id,
            'title': self.title,
            'currentStatus': self.current_status.value,
            'estimatedCompletionDate': to_iso_string(self.estimated_completion_date),
            'confidence': self.confidence.value,
            'factorsConsidered': self.factors_considered,
            'daysRemaining': self.days_remaining,
            'riskFactors': self.risk_factors,
        }


class Forecaster:
    """Projects completion dates for every task that is not completed"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def forecast(self, tasks: Iterable[Task], cycle_times: Optional[CycleTimeMetrics] = None,
                 now: Optional[datetime] = None) -> List[ForecastData]:
        """Forecast open tasks, in input order.

        When ``cycle_times`` is omitted it is computed from the same tasks.
        """
        now = ensure_aware(now) or now_utc()
        tasks = list(tasks)
        if cycle_times is None:
            cycle_times = CycleTimeAnalyzer(self.config).analyze(tasks, now=now)

        forecasts = [self.forecast_task(task, cycle_times, now) for task in tasks if not task.is_completed]
        logger.debug(f"Generated {len(forecasts)} forecasts")
        return forecasts

    def estimate_days(self, task: Task, cycle_times: CycleTimeMetrics) -> float:
        """Priority bucket average (or overall average), scaled by current status."""
        base = cycle_times.by_priority.get(task.priority) or cycle_times.average_cycle_time
        if task.status == TaskStatus.IN_PROGRESS:
            return base * self.config.in_progress_factor
        if task.status == TaskStatus.BLOCKED:
            return base * self.config.blocked_factor
        return base

    def confidence(self, task: Task) -> ConfidenceLevel:
        dependency_count = len(task.dependencies)
        if task.status == TaskStatus.BLOCKED or dependency_count > self.config.low_confidence_dependency_count:
            return ConfidenceLevel.LOW
        if task.status == TaskStatus.IN_PROGRESS and dependency_count == 0:
            return ConfidenceLevel.HIGH
        return ConfidenceLevel.MEDIUM

    def forecast_task(self, task: Task, cycle_times: CycleTimeMetrics, now: datetime) -> ForecastData:
        estimate = self.estimate_days(task, cycle_times)
        # timedelta keeps microsecond resolution, so float noise in the
        # multiplied estimate does not leak into days_remaining
        try:
            offset = timedelta(days=estimate)
        except OverflowError:
            days_remaining = math.ceil(estimate)
        else:
            days_remaining = math.ceil(offset.total_seconds() / SECONDS_PER_DAY)
        estimated_completion = add_days(now, estimate)

        factors = [
            f"Average cycle time for {task.priority.value} priority tasks",
            f"Current status: {task.status.value}",
        ]
        if task.dependencies:
            factors.append(f"{len(task.dependencies)} dependencies")

        risk_factors = []
        if task.status == TaskStatus.BLOCKED:
            risk_factors.append("Currently blocked")
        if len(task.dependencies) > self.config.multiple_dependency_count:
            risk_factors.append("Multiple dependencies")
        if task.due_date is not None and estimated_completion > task.due_date:
            risk_factors.append("Estimated completion after due date")
        if not task.supporting_members:
            risk_factors.append("No supporting team members")

        return ForecastData(
            task_id=task.id,
            title=task.title,
            current_status=task.status,
            estimated_completion_date=estimated_completion,
            confidence=self.confidence(task),
            days_remaining=days_remaining,
            factors_considered=factors,
            risk_factors=risk_factors,
        )
