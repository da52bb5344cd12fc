"""Cycle time statistics: averages, percentiles and a monthly trend."""

import logging
import math
import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import Priority, Task
from ..utils.datetime import ensure_aware, month_abbreviation, now_utc
from .trends import TrendData, annotate_changes, monthly_buckets

logger = logging.getLogger(__name__)


@dataclass
class CycleTimeMetrics:
    """Cycle time statistics over completed tasks, in days"""
    average_cycle_time: float
    by_priority: Dict[Priority, float]
    by_assignee: Dict[str, float]
    median: float
    percentile90: float
    trend: List[TrendData] = field(default_factory=list)
    sample_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'averageCycleTime': self.average_cycle_time,
            'byPriority': {p.value: v for p, v in self.by_priority.items()},
            'byAssignee': dict(self.by_assignee),
            'trend': [point.to_dict() for point in self.trend],
            'median': self.median,
            'percentile90': self.percentile90,
            'sampleSize': self.sample_size,
        }


def sorted_percentile(sorted_values: List[float], fraction: float) -> float:
    """Value at index floor(n * fraction) of an ascending list, clamped to the last index."""
    if not sorted_values:
        return 0.0
    index = min(int(math.floor(len(sorted_values) * fraction)), len(sorted_values) - 1)
    return sorted_values[index]


def mean_or_zero(values: List[float]) -> float:
    return statistics.mean(values) if values else 0.0


class CycleTimeAnalyzer:
    """Computes cycle time statistics from completed tasks with a completion time"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def analyze(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> CycleTimeMetrics:
        now = ensure_aware(now) or now_utc()
        completed = [t for t in tasks if t.is_completed and t.completed_at is not None]
        cycle_times = [t.cycle_time_days for t in completed]

        by_priority_samples: Dict[Priority, List[float]] = {p: [] for p in Priority}
        assignee_totals: Dict[str, float] = defaultdict(float)
        assignee_counts: Dict[str, int] = defaultdict(int)
        for task, days in zip(completed, cycle_times):
            by_priority_samples[task.priority].append(days)
            if task.assignee_id is not None:
                assignee_totals[task.assignee_id] += days
                assignee_counts[task.assignee_id] += 1

        by_assignee = {
            assignee: assignee_totals[assignee] / assignee_counts[assignee]
            for assignee in assignee_totals
        }

        ordered = sorted(cycle_times)
        logger.debug(f"Cycle time sample of {len(ordered)} completed tasks")

        return CycleTimeMetrics(
            average_cycle_time=mean_or_zero(cycle_times),
            by_priority={p: mean_or_zero(samples) for p, samples in by_priority_samples.items()},
            by_assignee=by_assignee,
            median=sorted_percentile(ordered, 0.5),
            percentile90=sorted_percentile(ordered, 0.9),
            trend=self._monthly_trend(completed, now),
            sample_size=len(ordered),
        )

    def _monthly_trend(self, completed: List[Task], now: datetime) -> List[TrendData]:
        trend = []
        for bucket in monthly_buckets(now, self.config.cycle_time_trend_months):
            month_times = [t.cycle_time_days for t in completed if bucket.contains(t.completed_at)]
            trend.append(TrendData(
                label=month_abbreviation(bucket.period_start),
                value=mean_or_zero(month_times),
                date=bucket.period_start,
                period_end=bucket.period_end,
            ))
        annotate_changes(trend)
        return trend
