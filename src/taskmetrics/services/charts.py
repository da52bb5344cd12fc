"""Chart-ready series for the reporting front end."""

from typing import Any, Dict, Iterable, List, Optional

from ..domain import Priority, Task, TaskStatus
from .cycle_time import CycleTimeMetrics
from .trends import TrendData

STATUS_LABELS = [
    (TaskStatus.COMPLETED, "Completed"),
    (TaskStatus.IN_PROGRESS, "In Progress"),
    (TaskStatus.PENDING, "Pending"),
    (TaskStatus.BLOCKED, "Blocked"),
]

PRIORITY_LABELS = [
    (Priority.CRITICAL, "Critical"),
    (Priority.HIGH, "High"),
    (Priority.MEDIUM, "Medium"),
    (Priority.LOW, "Low"),
]


def _series(labels: List[str], label: str, data: List[float]) -> Dict[str, Any]:
    return {"labels": labels, "datasets": [{"label": label, "data": data}]}


def build_chart_data(kind: str, tasks: Iterable[Task] = (),
                     trend_data: Optional[List[TrendData]] = None,
                     cycle_time_metrics: Optional[CycleTimeMetrics] = None) -> Optional[Dict[str, Any]]:
    """Build ``{labels, datasets}`` for a chart kind.

    Kinds: ``status``, ``priority``, ``completion-trend`` (needs ``trend_data``)
    and ``cycle-time`` (needs ``cycle_time_metrics``). Returns None for an
    unknown kind or a missing series.
    """
    tasks = list(tasks)

    if kind == "status":
        return _series(
            [name for _, name in STATUS_LABELS],
            "Tasks by Status",
            [sum(1 for t in tasks if t.status == status) for status, _ in STATUS_LABELS],
        )

    if kind == "priority":
        return _series(
            [name for _, name in PRIORITY_LABELS],
            "Tasks by Priority",
            [sum(1 for t in tasks if t.priority == priority) for priority, _ in PRIORITY_LABELS],
        )

    if kind == "completion-trend":
        if trend_data is None:
            return None
        return _series([p.label for p in trend_data], "Completed Tasks", [p.value for p in trend_data])

    if kind == "cycle-time":
        if cycle_time_metrics is None:
            return None
        trend = cycle_time_metrics.trend
        return _series([p.label for p in trend], "Average Cycle Time (days)", [p.value for p in trend])

    return None
