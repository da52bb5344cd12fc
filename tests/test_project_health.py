"""Tests for ProjectHealthAssessor."""

from datetime import datetime, timedelta

import pytest

from taskmetrics.config import AnalyticsConfig
from taskmetrics.domain import Priority, Task, TaskStatus
from taskmetrics.services import ProjectHealthAssessor, RiskLevel, VelocityTrend
from taskmetrics.utils.datetime import max_utc, min_utc


class TestProjectHealthAssessor:
    """Test suite for ProjectHealthAssessor"""

    def setup_method(self):
        self.assessor = ProjectHealthAssessor()

    def test_empty_snapshot(self, now):
        health = self.assessor.assess([], now=now)

        assert health.overall_progress == 0
        assert health.velocity_trend == VelocityTrend.DECREASING
        assert health.risk_level == RiskLevel.LOW
        assert health.average_cycle_time == 0
        assert health.predicted_completion_date == now
        assert set(health.status_distribution) == set(TaskStatus)
        assert set(health.priority_distribution) == set(Priority)
        assert sum(health.status_distribution.values()) == 0

    def test_distributions_sum_to_total(self, make_task, now):
        tasks = [
            make_task(status=TaskStatus.COMPLETED, priority=Priority.HIGH, completed_days_ago=1),
            make_task(status=TaskStatus.PENDING, priority=Priority.LOW),
            make_task(status=TaskStatus.PENDING, priority=Priority.LOW),
            make_task(status=TaskStatus.BLOCKED, priority=Priority.CRITICAL),
        ]

        health = self.assessor.assess(tasks, now=now)

        assert sum(health.status_distribution.values()) == len(tasks)
        assert sum(health.priority_distribution.values()) == len(tasks)
        assert health.status_distribution[TaskStatus.PENDING] == 2
        assert health.status_distribution[TaskStatus.IN_PROGRESS] == 0
        assert health.priority_distribution[Priority.MEDIUM] == 0
        assert health.overall_progress == pytest.approx(25)

    def test_deadlines_and_overdue(self, make_task, now):
        tasks = [
            make_task(due_in_days=0),
            make_task(due_in_days=7),
            make_task(due_in_days=7.5),
            make_task(due_in_days=-1),
            make_task(due_in_days=None),
            make_task(status=TaskStatus.COMPLETED, completed_days_ago=1, due_in_days=2),
        ]

        health = self.assessor.assess(tasks, now=now)

        assert health.upcoming_deadlines == 2
        assert health.overdue_actions == 1

    def test_predicted_completion_date(self, make_task, now):
        tasks = [
            make_task(status=TaskStatus.COMPLETED, created_days_ago=10, completed_days_ago=6),
            make_task(status=TaskStatus.COMPLETED, created_days_ago=10, completed_days_ago=4),
            make_task(status=TaskStatus.PENDING),
            make_task(status=TaskStatus.PENDING),
            make_task(status=TaskStatus.IN_PROGRESS),
            make_task(status=TaskStatus.BLOCKED),
        ]

        health = self.assessor.assess(tasks, now=now)

        assert health.average_cycle_time == pytest.approx(5)
        # Blocked tasks are not counted as outstanding work
        assert health.predicted_completion_date == now + timedelta(days=15)

    def test_velocity_trend_thresholds(self):
        assert self.assessor.velocity_trend(70.1) == VelocityTrend.INCREASING
        assert self.assessor.velocity_trend(70) == VelocityTrend.STABLE
        assert self.assessor.velocity_trend(40.1) == VelocityTrend.STABLE
        assert self.assessor.velocity_trend(40) == VelocityTrend.DECREASING

    @pytest.mark.parametrize("overdue,blockers,expected", [
        (0, 0, RiskLevel.LOW),
        (2, 0, RiskLevel.LOW),
        (3, 0, RiskLevel.MEDIUM),
        (0, 1, RiskLevel.MEDIUM),
        (6, 0, RiskLevel.HIGH),
        (0, 3, RiskLevel.HIGH),
        (11, 0, RiskLevel.CRITICAL),
        (0, 6, RiskLevel.CRITICAL),
        (10, 5, RiskLevel.HIGH),
    ])
    def test_risk_level_tiers(self, overdue, blockers, expected):
        assert self.assessor.risk_level(overdue, blockers) == expected

    def test_single_blocker_raises_risk(self, make_task, now):
        health = self.assessor.assess([make_task(status=TaskStatus.BLOCKED)], now=now)
        assert health.blockers_count == 1
        assert health.risk_level == RiskLevel.MEDIUM

    def test_custom_thresholds(self, make_task, now):
        config = AnalyticsConfig(upcoming_deadline_days=30, velocity_increasing_threshold=10)
        tasks = [
            make_task(due_in_days=20),
            make_task(status=TaskStatus.COMPLETED, completed_days_ago=1),
        ]

        health = ProjectHealthAssessor(config).assess(tasks, now=now)

        assert health.upcoming_deadlines == 1
        assert health.velocity_trend == VelocityTrend.INCREASING

    def test_to_dict(self, make_task, now):
        data = self.assessor.assess([make_task()], now=now).to_dict()

        assert data["statusDistribution"] == {
            "pending": 1, "in-progress": 0, "blocked": 0, "completed": 0,
        }
        assert data["riskLevel"] == "low"
        assert data["velocityTrend"] == "decreasing"
        assert data["predictedCompletionDate"] == now.isoformat()

    def test_projection_is_clamped_to_representable_dates(self, make_task, now):
        # Completion long before creation gives a hugely negative average
        backwards = Task(id="odd", title="odd", created_at=datetime(9000, 1, 1),
                         status=TaskStatus.COMPLETED, completed_at=datetime(2026, 1, 1))
        tasks = [backwards] + [make_task() for _ in range(3)]

        health = self.assessor.assess(tasks, now=now)

        assert health.average_cycle_time < 0
        assert health.predicted_completion_date == min_utc()
        assert health.to_dict()["predictedCompletionDate"].startswith("0001-01-01")

    def test_projection_past_year_9999_is_clamped(self, make_task, now):
        slow = Task(id="slow", title="slow", created_at=datetime(1, 1, 1),
                    status=TaskStatus.COMPLETED, completed_at=datetime(9000, 1, 1))
        tasks = [slow] + [make_task() for _ in range(3)]

        health = self.assessor.assess(tasks, now=now)

        assert health.predicted_completion_date == max_utc()
