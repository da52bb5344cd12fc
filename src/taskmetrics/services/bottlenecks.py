"""Bottleneck detection for tasks stuck in one status too long."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import HIGH_PRIORITIES, Task, TaskStatus, TeamMember
from ..utils.datetime import days_between, ensure_aware, now_utc, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class BottleneckAnalysis:
    """A flagged task with its blocking factors and a 0-100 risk score"""
    task_id: str
    title: str
    assignee: Optional[TeamMember]
    days_in_status: int
    current_status: TaskStatus
    risk_score: int
    blocking_factors: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'taskId': self.task_id,
            'title': self.title,
            'assignee': self.assignee.to_dict() if self.assignee else None,
            'daysInStatus': self.days_in_status,
            'currentStatus': self.current_status.value,
            'blockingFactors': self.blocking_factors,
            'suggestedActions': self.suggested_actions,
            'riskScore': self.risk_score,
        }


class BottleneckDetector:
    """Flags open tasks whose time in the current status meets the threshold"""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def detect(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> List[BottleneckAnalysis]:
        """Return bottlenecks ordered by risk score, highest first.

        Equal scores keep their input order.
        """
        now = ensure_aware(now) or now_utc()
        bottlenecks = []

        for task in tasks:
            if task.is_completed:
                continue
            days_in_status = days_between(task.status_started_at, now)
            if days_in_status < self.config.bottleneck_threshold_days:
                continue

            factors, actions = self._blocking_factors(task, now)
            bottlenecks.append(BottleneckAnalysis(
                task_id=task.id,
                title=task.title,
                assignee=task.primary_assignee,
                days_in_status=round_half_up(days_in_status),
                current_status=task.status,
                risk_score=self.risk_score(task, days_in_status, now),
                blocking_factors=factors,
                suggested_actions=actions,
            ))

        logger.debug(f"Flagged {len(bottlenecks)} bottlenecks")
        return sorted(bottlenecks, key=lambda b: b.risk_score, reverse=True)

    def risk_score(self, task: Task, days_in_status: float, now: datetime) -> int:
        cfg = self.config
        score = days_in_status * cfg.risk_per_day_in_status
        if task.status == TaskStatus.BLOCKED:
            score += cfg.risk_blocked_weight
        if task.priority in HIGH_PRIORITIES:
            score += cfg.risk_high_priority_weight
        if task.is_overdue(now):
            score += cfg.risk_overdue_weight
        return round_half_up(max(0, min(cfg.max_risk_score, score)))

    def _blocking_factors(self, task: Task, now: datetime) -> Tuple[List[str], List[str]]:
        factors = []
        actions = []

        if task.status == TaskStatus.BLOCKED:
            factors.append("Task marked as blocked")
            actions.append("Review blocking issues and assign resources")

        if task.dependencies:
            factors.append(f"Has {len(task.dependencies)} dependencies")
            actions.append("Check status of dependent tasks")

        if task.is_overdue(now):
            factors.append("Task is overdue")
            actions.append("Re-evaluate timeline and priority")

        if not task.supporting_members:
            factors.append("No supporting team members assigned")
            actions.append("Consider adding supporting members")

        return factors, actions
