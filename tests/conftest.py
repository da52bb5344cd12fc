"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from taskmetrics.domain import Priority, StatusChange, Task, TaskStatus, TeamMember  # noqa: E402

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time; tests never read the wall clock."""
    return NOW


@pytest.fixture
def members():
    return [
        TeamMember(id="m1", name="Alex Rivera", email="alex@example.com"),
        TeamMember(id="m2", name="Sam Chen", email="sam@example.com"),
        TeamMember(id="m3", name="Jordan Lee", email="jordan@example.com"),
    ]


@pytest.fixture
def make_task(members):
    """Factory building tasks relative to NOW with sensible defaults."""
    counter = {"n": 0}

    def factory(status=TaskStatus.PENDING, priority=Priority.MEDIUM, assignee=None,
                created_days_ago=10.0, due_in_days=5.0, completed_days_ago=None,
                supporting=None, dependencies=None, history_days_ago=None, **kwargs):
        counter["n"] += 1
        task_id = kwargs.pop("id", f"t{counter['n']}")
        history = []
        if history_days_ago is not None:
            history.append(StatusChange(
                from_status=TaskStatus.PENDING,
                to_status=status,
                changed_at=NOW - timedelta(days=history_days_ago),
                changed_by="m1",
            ))
        return Task(
            id=task_id,
            title=kwargs.pop("title", f"Task {task_id}"),
            status=status,
            priority=priority,
            primary_assignee=assignee or members[0],
            supporting_members=[members[1]] if supporting is None else supporting,
            dependencies=dependencies or [],
            created_at=NOW - timedelta(days=created_days_ago),
            due_date=None if due_in_days is None else NOW + timedelta(days=due_in_days),
            completed_at=None if completed_days_ago is None else NOW - timedelta(days=completed_days_ago),
            status_history=history,
            **kwargs,
        )

    return factory
