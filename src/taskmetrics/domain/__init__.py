"""Domain models for Task Metrics."""

from .task import Task, TaskStatus, Priority, StatusChange, TeamMember, HIGH_PRIORITIES
from .dataset import TaskDataset

__all__ = [
    "Task",
    "TaskStatus",
    "Priority",
    "StatusChange",
    "TeamMember",
    "HIGH_PRIORITIES",
    "TaskDataset",
]
