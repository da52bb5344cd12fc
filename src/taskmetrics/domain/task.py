"""Task and team member records consumed by the analytics engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import DatasetError
from ..utils.datetime import days_between, ensure_aware, parse_datetime, to_iso_string


class Priority(Enum):
    """Task priority levels."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(Enum):
    """Task status states."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str) -> "TaskStatus":
        """Parse a status, accepting ``in_progress`` as well as ``in-progress``."""
        return cls(str(value).strip().lower().replace("_", "-"))


HIGH_PRIORITIES = frozenset({Priority.CRITICAL, Priority.HIGH})


@dataclass
class TeamMember:
    """A person tasks can be assigned to. Identity is by ``id``."""

    id: str
    name: str = ""
    email: str = ""
    role: Optional[str] = None
    department: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            self.name = self.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TeamMember):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamMember":
        if not isinstance(data, dict):
            raise DatasetError(f"Team member must be a mapping, got {type(data).__name__}",
                               value=data)
        if "id" not in data or data["id"] in (None, ""):
            raise DatasetError("Team member is missing an id", field_name="id", value=data)
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=data.get("role"),
            department=data.get("department"),
        )


@dataclass
class StatusChange:
    """A single transition recorded in a task's status history."""

    from_status: TaskStatus
    to_status: TaskStatus
    changed_at: datetime
    changed_by: str = ""
    reason: Optional[str] = None

    def __post_init__(self):
        self.changed_at = ensure_aware(self.changed_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_status.value,
            "to": self.to_status.value,
            "changedAt": to_iso_string(self.changed_at),
            "changedBy": self.changed_by,
            "reason": self.reason,
        }


@dataclass
class Task:
    """A unit of tracked work.

    ``completed_at`` is expected to be set exactly when the status is
    completed; records violating that are tolerated by every calculator.
    """

    id: str
    title: str
    created_at: datetime
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    primary_assignee: Optional[TeamMember] = None
    supporting_members: List[TeamMember] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status_history: List[StatusChange] = field(default_factory=list)

    description: str = ""
    tags: List[str] = field(default_factory=list)
    created_by: str = ""

    def __post_init__(self):
        self.created_at = ensure_aware(self.created_at)
        self.due_date = ensure_aware(self.due_date)
        self.completed_at = ensure_aware(self.completed_at)
        self.updated_at = ensure_aware(self.updated_at) or self.status_started_at

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def status_started_at(self) -> datetime:
        """When the current status was entered: last transition, else creation."""
        if self.status_history:
            return self.status_history[-1].changed_at
        return self.created_at

    @property
    def cycle_time_days(self) -> Optional[float]:
        """Days from creation to completion, or None without a completion time.

        Negative when ``completed_at`` precedes ``created_at``.
        """
        if self.completed_at is None:
            return None
        return days_between(self.created_at, self.completed_at)

    @property
    def assignee_id(self) -> Optional[str]:
        return self.primary_assignee.id if self.primary_assignee else None

    def is_overdue(self, now: datetime) -> bool:
        """Not completed and due strictly before ``now``."""
        return not self.is_completed and self.due_date is not None and self.due_date < now

    def completed_on_time(self) -> bool:
        """Completed no later than its due date."""
        if self.completed_at is None or self.due_date is None:
            return False
        return self.completed_at <= self.due_date

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task to a dictionary with timezone-aware ISO strings."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "primaryAssignee": self.primary_assignee.to_dict() if self.primary_assignee else None,
            "supportingMembers": [m.to_dict() for m in self.supporting_members],
            "dependencies": list(self.dependencies),
            "dueDate": to_iso_string(self.due_date),
            "createdAt": to_iso_string(self.created_at),
            "createdBy": self.created_by,
            "updatedAt": to_iso_string(self.updated_at),
            "completedAt": to_iso_string(self.completed_at),
            "statusHistory": [change.to_dict() for change in self.status_history],
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  members: Optional[Dict[str, TeamMember]] = None) -> "Task":
        """Create a Task from a document.

        Accepts flat camelCase documents as well as the nested ``who``/``when``
        shape. Assignees may be member objects or member ids; ids are resolved
        against ``members``.

        Raises:
            DatasetError: On a missing id, unknown enum value or bad timestamp.
        """
        members = members or {}
        if not isinstance(data, dict):
            raise DatasetError(f"Task must be a mapping, got {type(data).__name__}", value=data)
        task_id = data.get("id")
        if task_id in (None, ""):
            raise DatasetError("Task is missing an id", field_name="id", value=data)
        task_id = str(task_id)

        who = data.get("who") or {}
        when = data.get("when") or {}
        for name, section in (("who", who), ("when", when)):
            if not isinstance(section, dict):
                raise DatasetError(f"Task {task_id}: {name} must be a mapping",
                                   record_id=task_id, field_name=name, value=section)

        def parse_field(name: str, value: Any) -> Optional[datetime]:
            try:
                return parse_datetime(value)
            except ValueError as e:
                raise DatasetError(f"Task {task_id}: invalid {name} {value!r}",
                                   record_id=task_id, field_name=name, value=value) from e

        def resolve_member(value: Any) -> Optional[TeamMember]:
            if value is None or value == "":
                return None
            if isinstance(value, dict):
                member_id = str(value.get("id", ""))
                if member_id in members:
                    return members[member_id]
                return TeamMember.from_dict(value)
            member_id = str(value)
            return members.get(member_id) or TeamMember(id=member_id)

        def parse_enum(enum_parse, name: str, value: Any):
            try:
                return enum_parse(value)
            except ValueError as e:
                raise DatasetError(f"Task {task_id}: unknown {name} {value!r}",
                                   record_id=task_id, field_name=name, value=value) from e

        history_entries = data.get("statusHistory", []) or []
        if not isinstance(history_entries, list):
            raise DatasetError(f"Task {task_id}: statusHistory must be a list",
                               record_id=task_id, field_name="statusHistory", value=history_entries)

        history = []
        for entry in history_entries:
            if not isinstance(entry, dict):
                raise DatasetError(f"Task {task_id}: status change must be a mapping",
                                   record_id=task_id, field_name="statusHistory", value=entry)
            changed_at = parse_field("statusHistory.changedAt", entry.get("changedAt"))
            if changed_at is None:
                raise DatasetError(f"Task {task_id}: status change without changedAt",
                                   record_id=task_id, field_name="statusHistory")
            history.append(StatusChange(
                from_status=parse_enum(TaskStatus.parse, "status", entry.get("from", "pending")),
                to_status=parse_enum(TaskStatus.parse, "status", entry.get("to", "pending")),
                changed_at=changed_at,
                changed_by=entry.get("changedBy", ""),
                reason=entry.get("reason"),
            ))

        created_at = parse_field("createdAt", data.get("createdAt"))
        if created_at is None:
            raise DatasetError(f"Task {task_id}: createdAt is required",
                               record_id=task_id, field_name="createdAt")

        supporting = data.get("supportingMembers", who.get("supportingMembers")) or []

        return cls(
            id=task_id,
            title=data.get("title", ""),
            description=data.get("description", ""),
            status=parse_enum(TaskStatus.parse, "status", data.get("status", "pending")),
            priority=parse_enum(Priority, "priority", data.get("priority", "medium")),
            primary_assignee=resolve_member(data.get("primaryAssignee", who.get("primaryAssignee"))),
            supporting_members=[m for m in (resolve_member(s) for s in supporting) if m],
            dependencies=[str(d) for d in data.get("dependencies", []) or []],
            due_date=parse_field("dueDate", data.get("dueDate", when.get("dueDate"))),
            created_at=created_at,
            created_by=data.get("createdBy", ""),
            updated_at=parse_field("updatedAt", data.get("updatedAt")),
            completed_at=parse_field("completedAt", data.get("completedAt")),
            status_history=history,
            tags=list(data.get("tags", []) or []),
        )
