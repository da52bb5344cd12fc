"""Task Metrics - analytics and forecasting over task-tracking snapshots."""

__version__ = "0.1.0"
__author__ = "Task Metrics Team"

from .domain import (
    Task,
    TaskStatus,
    Priority,
    StatusChange,
    TeamMember,
    TaskDataset,
)

__all__ = [
    "Task",
    "TaskStatus",
    "Priority",
    "StatusChange",
    "TeamMember",
    "TaskDataset",
    "__version__",
]
