"""Completion trends bucketed by day, week, month or quarter."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import Task
from ..utils.datetime import (
    add_months,
    day_start,
    ensure_aware,
    month_abbreviation,
    month_start,
    now_utc,
    quarter_start,
    to_iso_string,
)

logger = logging.getLogger(__name__)


class Granularity(Enum):
    """Bucket size for trend series"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


@dataclass
class TrendBucket:
    """Half-open time window [period_start, period_end)"""
    label: str
    period_start: datetime
    period_end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.period_start <= moment < self.period_end


@dataclass
class TrendData:
    """One point of a trend series"""
    label: str
    value: float
    date: datetime
    period_end: Optional[datetime] = None
    change: Optional[float] = None  # % vs previous point; None without a baseline

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'value': self.value,
            'date': to_iso_string(self.date),
            'periodStart': to_iso_string(self.date),
            'periodEnd': to_iso_string(self.period_end),
            'change': self.change,
        }


@dataclass
class CompletionTrend:
    """Completed-task counts per bucket with period-over-period change"""
    period: Granularity
    data: List[TrendData]
    current_period: TrendData
    previous_period: TrendData
    percentage_change: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period': self.period.value,
            'data': [point.to_dict() for point in self.data],
            'currentPeriod': self.current_period.to_dict(),
            'previousPeriod': self.previous_period.to_dict(),
            'percentageChange': self.percentage_change,
        }


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is no previous value."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def annotate_changes(points: List[TrendData]) -> None:
    """Fill each point's ``change`` relative to the point before it."""
    previous = None
    for point in points:
        if previous is not None and previous.value != 0:
            point.change = percentage_change(point.value, previous.value)
        else:
            point.change = None
        previous = point


def monthly_buckets(now: datetime, count: int, months_per_bucket: int = 1) -> List[TrendBucket]:
    """Calendar-aligned month (or multi-month) windows ending with the current one, oldest first."""
    if months_per_bucket == 3:
        current = quarter_start(now)
    else:
        current = month_start(now)

    buckets = []
    for i in range(count - 1, -1, -1):
        start = add_months(current, -i * months_per_bucket)
        end = add_months(start, months_per_bucket)
        if months_per_bucket == 3:
            label = f"Q{(start.month - 1) // 3 + 1} {start.year}"
        else:
            label = f"{month_abbreviation(start)} {start.year}"
        buckets.append(TrendBucket(label=label, period_start=start, period_end=end))
    return buckets


class TrendAnalyzer:
    """Buckets completions into fixed-length series walking back from now"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def period_count(self, granularity: Granularity) -> int:
        return {
            Granularity.DAILY: self.config.daily_periods,
            Granularity.WEEKLY: self.config.weekly_periods,
            Granularity.MONTHLY: self.config.monthly_periods,
            Granularity.QUARTERLY: self.config.quarterly_periods,
        }[granularity]

    def buckets(self, granularity: Granularity, now: datetime) -> List[TrendBucket]:
        """Generate the bucket windows for a granularity, oldest first.

        Daily and weekly windows are rolling and end at the close of the
        current UTC day; monthly and quarterly windows follow the calendar.
        """
        count = self.period_count(granularity)

        if granularity == Granularity.MONTHLY:
            return monthly_buckets(now, count)
        if granularity == Granularity.QUARTERLY:
            return monthly_buckets(now, count, months_per_bucket=3)

        horizon = day_start(now) + timedelta(days=1)
        span = timedelta(days=1 if granularity == Granularity.DAILY else 7)
        buckets = []
        for i in range(count - 1, -1, -1):
            end = horizon - span * i
            start = end - span
            if granularity == Granularity.DAILY:
                label = f"{month_abbreviation(start)} {start.day}"
            else:
                label = f"Week {count - i}"
            buckets.append(TrendBucket(label=label, period_start=start, period_end=end))
        return buckets

    def analyze(self, tasks: Iterable[Task], granularity: Granularity = Granularity.MONTHLY,
                now: Optional[datetime] = None) -> CompletionTrend:
        now = ensure_aware(now) or now_utc()
        completion_times = [t.completed_at for t in tasks if t.completed_at is not None]

        data = []
        for bucket in self.buckets(granularity, now):
            count = sum(1 for moment in completion_times if bucket.contains(moment))
            data.append(TrendData(
                label=bucket.label,
                value=count,
                date=bucket.period_start,
                period_end=bucket.period_end,
            ))
        annotate_changes(data)

        current = data[-1]
        if len(data) > 1:
            previous = data[-2]
        else:
            previous = TrendData(label="", value=0, date=now)

        logger.debug(f"{granularity.value} trend: {len(data)} buckets, "
                     f"{len(completion_times)} completions considered")

        return CompletionTrend(
            period=granularity,
            data=data,
            current_period=current,
            previous_period=previous,
            percentage_change=percentage_change(current.value, previous.value),
        )
