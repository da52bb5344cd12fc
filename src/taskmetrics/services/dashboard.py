"""Dashboard headline numbers and team workload statistics."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..domain import Task, TaskStatus, TeamMember
from ..utils.datetime import days_between, ensure_aware, now_utc, round_decimal, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    """Headline counts shown on the main dashboard"""
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    overdue: int = 0
    completion_rate: int = 0  # whole percent
    average_completion_time: int = 0  # whole days

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'completed': self.completed,
            'inProgress': self.in_progress,
            'pending': self.pending,
            'overdue': self.overdue,
            'completionRate': self.completion_rate,
            'averageCompletionTime': self.average_completion_time,
        }


class DashboardStatsCalculator:
    """Rounded headline numbers over the whole snapshot"""

    def calculate(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> DashboardStats:
        now = ensure_aware(now) or now_utc()
        tasks = list(tasks)
        total = len(tasks)
        completed = sum(1 for t in tasks if t.is_completed)

        # Whole elapsed days per task, truncated towards zero
        elapsed_days = [
            int(days_between(t.created_at, t.completed_at))
            for t in tasks if t.is_completed and t.completed_at is not None
        ]

        return DashboardStats(
            total=total,
            completed=completed,
            in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            pending=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
            overdue=sum(1 for t in tasks if t.is_overdue(now)),
            completion_rate=round_half_up(completed / total * 100) if total > 0 else 0,
            average_completion_time=(
                round_half_up(sum(elapsed_days) / len(elapsed_days)) if elapsed_days else 0
            ),
        )


@dataclass
class MemberWorkload:
    """Task counts for one team member"""
    member: TeamMember
    done: int = 0
    active: int = 0
    pending: int = 0
    blocked: int = 0

    @property
    def total(self) -> int:
        return self.done + self.active + self.pending + self.blocked

    def to_dict(self) -> Dict[str, Any]:
        return {
            'memberId': self.member.id,
            'memberName': self.member.name,
            'email': self.member.email,
            'role': self.member.role,
            'department': self.member.department,
            'taskCounts': {
                'done': self.done,
                'active': self.active,
                'pending': self.pending,
                'blocked': self.blocked,
                'total': self.total,
            },
        }


@dataclass
class WorkloadStatistics:
    """Team-wide aggregation of member workloads"""
    total_members: int = 0
    total_tasks: int = 0
    average_tasks_per_member: float = 0.0
    tasks_by_status: Dict[str, int] = field(
        default_factory=lambda: {'done': 0, 'active': 0, 'pending': 0, 'blocked': 0}
    )
    completion_rate: float = 0.0
    average_completion: int = 0
    members: List[MemberWorkload] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalMembers': self.total_members,
            'totalTasks': self.total_tasks,
            'averageTasksPerMember': self.average_tasks_per_member,
            'tasksByStatus': dict(self.tasks_by_status),
            'completionRate': self.completion_rate,
            'averageCompletion': self.average_completion,
            'members': [m.to_dict() for m in self.members],
        }


class WorkloadAnalyzer:
    """Counts each member's primary assignments by status"""

    _STATUS_KEYS = {
        TaskStatus.COMPLETED: 'done',
        TaskStatus.IN_PROGRESS: 'active',
        TaskStatus.PENDING: 'pending',
        TaskStatus.BLOCKED: 'blocked',
    }

    def member_workloads(self, tasks: Iterable[Task], members: Iterable[TeamMember]) -> List[MemberWorkload]:
        workloads = {member.id: MemberWorkload(member=member) for member in members}
        for task in tasks:
            workload = workloads.get(task.assignee_id)
            if workload is None:
                continue
            key = self._STATUS_KEYS[task.status]
            setattr(workload, key, getattr(workload, key) + 1)
        return list(workloads.values())

    def calculate(self, tasks: Iterable[Task], members: Iterable[TeamMember]) -> WorkloadStatistics:
        workloads = self.member_workloads(tasks, members)
        if not workloads:
            return WorkloadStatistics()

        by_status = {
            'done': sum(w.done for w in workloads),
            'active': sum(w.active for w in workloads),
            'pending': sum(w.pending for w in workloads),
            'blocked': sum(w.blocked for w in workloads),
        }
        total_tasks = sum(by_status.values())
        completion = (by_status['done'] / total_tasks * 100) if total_tasks > 0 else 0.0

        logger.debug(f"Workload over {len(workloads)} members, {total_tasks} assigned tasks")
        return WorkloadStatistics(
            total_members=len(workloads),
            total_tasks=total_tasks,
            average_tasks_per_member=round_decimal(total_tasks / len(workloads)),
            tasks_by_status=by_status,
            completion_rate=round_decimal(completion),
            average_completion=round_half_up(completion),
            members=workloads,
        )
