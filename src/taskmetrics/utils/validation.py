"""Tolerant consistency checks for task records.

The analytics engine never rejects malformed records; it reports them so the
upstream data issue is visible without being silently "fixed".
"""

import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


def validate_task(task) -> List[str]:
    """Return human-readable consistency issues for a single task.

    Checks:
        - completed task without a completion timestamp
        - completion timestamp on a task that is not completed
        - completion earlier than creation (negative cycle time)
        - missing due date
    """
    issues = []

    if task.is_completed and task.completed_at is None:
        issues.append("Completed task has no completedAt timestamp")

    if not task.is_completed and task.completed_at is not None:
        issues.append(f"completedAt is set but status is {task.status.value}")

    if task.completed_at is not None and task.completed_at < task.created_at:
        issues.append("completedAt is earlier than createdAt")

    if task.due_date is None:
        issues.append("Task has no dueDate")

    return issues


def validate_tasks(tasks: Iterable) -> Dict[str, List[str]]:
    """Validate a collection of tasks, logging each issue as a warning.

    Returns:
        Mapping of task id to its issues; tasks without issues are omitted.
    """
    report = {}
    for task in tasks:
        issues = validate_task(task)
        if issues:
            report[task.id] = issues
            for issue in issues:
                logger.warning(f"Task {task.id}: {issue}")
    return report
