"""Tests for completion trend bucketing."""

from datetime import datetime, timedelta, timezone

import pytest

from taskmetrics.config import AnalyticsConfig
from taskmetrics.domain import Task, TaskStatus
from taskmetrics.services import Granularity, TrendAnalyzer, TrendData
from taskmetrics.services.trends import annotate_changes, monthly_buckets, percentage_change


def completed_at(moment: datetime, task_id: str = "c") -> Task:
    return Task(
        id=task_id,
        title=task_id,
        created_at=moment - timedelta(days=3),
        status=TaskStatus.COMPLETED,
        completed_at=moment,
    )


class TestTrendBuckets:
    """Bucket windows and labels per granularity."""

    def setup_method(self):
        self.analyzer = TrendAnalyzer()

    @pytest.mark.parametrize("granularity,count", [
        (Granularity.DAILY, 30),
        (Granularity.WEEKLY, 12),
        (Granularity.MONTHLY, 12),
        (Granularity.QUARTERLY, 4),
    ])
    def test_series_length(self, granularity, count, now):
        assert len(self.analyzer.analyze([], granularity, now=now).data) == count

    def test_daily_buckets_end_with_today(self, now):
        buckets = self.analyzer.buckets(Granularity.DAILY, now)

        assert buckets[-1].label == "Jun 15"
        assert buckets[-1].period_start == datetime(2026, 6, 15, tzinfo=timezone.utc)
        assert buckets[-1].period_end == datetime(2026, 6, 16, tzinfo=timezone.utc)
        assert buckets[0].label == "May 17"

    def test_weekly_labels_count_up(self, now):
        buckets = self.analyzer.buckets(Granularity.WEEKLY, now)

        assert [b.label for b in buckets[:2]] == ["Week 1", "Week 2"]
        assert buckets[-1].label == "Week 12"
        assert buckets[-1].period_start == datetime(2026, 6, 9, tzinfo=timezone.utc)

    def test_buckets_are_contiguous(self, now):
        for granularity in Granularity:
            buckets = self.analyzer.buckets(granularity, now)
            for earlier, later in zip(buckets, buckets[1:]):
                assert earlier.period_end == later.period_start

    def test_monthly_labels_cross_year(self, now):
        labels = [b.label for b in monthly_buckets(now, 12)]
        assert labels[0] == "Jul 2025"
        assert labels[-1] == "Jun 2026"

    def test_quarter_labels(self, now):
        labels = [b.label for b in self.analyzer.buckets(Granularity.QUARTERLY, now)]
        assert labels == ["Q3 2025", "Q4 2025", "Q1 2026", "Q2 2026"]

    def test_month_includes_its_last_day(self, now):
        [june] = monthly_buckets(now, 1)
        assert june.contains(datetime(2026, 6, 30, 23, 59, tzinfo=timezone.utc))
        assert not june.contains(datetime(2026, 7, 1, tzinfo=timezone.utc))

    def test_configurable_period_counts(self, now):
        analyzer = TrendAnalyzer(AnalyticsConfig(daily_periods=7))
        assert len(analyzer.buckets(Granularity.DAILY, now)) == 7


class TestTrendAnalyzer:
    """Completion counting and change calculation."""

    def test_one_completion_per_month(self, now):
        tasks = []
        for offset in range(12):
            month = datetime(2025, 7, 10, tzinfo=timezone.utc)
            index = month.month - 1 + offset
            tasks.append(completed_at(month.replace(year=2025 + index // 12, month=index % 12 + 1),
                                      task_id=f"c{offset}"))

        trend = TrendAnalyzer().analyze(tasks, Granularity.MONTHLY, now=now)

        assert [point.value for point in trend.data] == [1] * 12
        assert trend.percentage_change == 0
        assert trend.data[0].change is None
        assert all(point.change == 0 for point in trend.data[1:])

    def test_counts_only_tasks_with_completion_time(self, now):
        finished = completed_at(now - timedelta(hours=1))
        open_task = Task(id="o", title="o", created_at=now - timedelta(days=2))

        trend = TrendAnalyzer().analyze([finished, open_task], Granularity.DAILY, now=now)

        assert trend.current_period.value == 1
        assert sum(point.value for point in trend.data) == 1

    def test_period_over_period_change(self, now):
        tasks = [completed_at(now - timedelta(hours=i), f"today{i}") for i in range(4)]
        tasks += [completed_at(now - timedelta(days=1, hours=i), f"yesterday{i}") for i in range(2)]

        trend = TrendAnalyzer().analyze(tasks, Granularity.DAILY, now=now)

        assert trend.current_period.value == 4
        assert trend.previous_period.value == 2
        assert trend.percentage_change == pytest.approx(100)
        assert trend.data[-1].change == pytest.approx(100)

    def test_zero_previous_gives_zero_change(self, now):
        tasks = [completed_at(now - timedelta(hours=1))]
        trend = TrendAnalyzer().analyze(tasks, Granularity.WEEKLY, now=now)

        assert trend.previous_period.value == 0
        assert trend.percentage_change == 0
        assert trend.data[-1].change is None

    def test_future_completions_are_ignored(self, now):
        tasks = [completed_at(now + timedelta(days=40))]
        trend = TrendAnalyzer().analyze(tasks, Granularity.MONTHLY, now=now)
        assert sum(point.value for point in trend.data) == 0

    def test_single_bucket_uses_placeholder_previous(self, now):
        analyzer = TrendAnalyzer(AnalyticsConfig(quarterly_periods=1))
        trend = analyzer.analyze([completed_at(now)], Granularity.QUARTERLY, now=now)

        assert trend.previous_period.label == ""
        assert trend.previous_period.value == 0
        assert trend.percentage_change == 0

    def test_to_dict(self, now):
        data = TrendAnalyzer().analyze([], Granularity.QUARTERLY, now=now).to_dict()

        assert data["period"] == "quarterly"
        assert data["currentPeriod"]["label"] == "Q2 2026"
        assert data["currentPeriod"]["periodStart"] == "2026-04-01T00:00:00+00:00"
        assert data["currentPeriod"]["periodEnd"] == "2026-07-01T00:00:00+00:00"


class TestChangeHelpers:

    def test_percentage_change(self):
        assert percentage_change(5, 0) == 0
        assert percentage_change(3, 4) == pytest.approx(-25)

    def test_annotate_changes(self, now):
        points = [TrendData("a", 2, now), TrendData("b", 3, now),
                  TrendData("c", 0, now), TrendData("d", 1, now)]
        annotate_changes(points)
        assert [p.change for p in points] == [None, pytest.approx(50), pytest.approx(-100), None]
