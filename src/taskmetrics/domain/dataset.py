"""Read-only task snapshot handed to the analytics engine."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from ..exceptions import DatasetError
from ..utils.validation import validate_tasks
from .task import Task, TeamMember

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskDataset:
    """An immutable snapshot of task and team member records."""

    tasks: Tuple[Task, ...] = field(default_factory=tuple)
    members: Tuple[TeamMember, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, tasks: Optional[List[Task]] = None,
           members: Optional[List[TeamMember]] = None) -> "TaskDataset":
        return cls(tasks=tuple(tasks or ()), members=tuple(members or ()))

    def member_index(self) -> Dict[str, TeamMember]:
        return {member.id: member for member in self.members}

    def validate(self) -> Dict[str, List[str]]:
        """Report per-task consistency issues without altering any record."""
        return validate_tasks(self.tasks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "members": [member.to_dict() for member in self.members],
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskDataset":
        """Build a dataset from ``{"members": [...], "tasks": [...]}``.

        Raises:
            DatasetError: If the document or any record is malformed.
        """
        if not isinstance(data, dict):
            raise DatasetError("Dataset must be a mapping with 'members' and 'tasks'")

        member_records = data.get("members", []) or []
        task_records = data.get("tasks", []) or []
        for name, records in (("members", member_records), ("tasks", task_records)):
            if not isinstance(records, list):
                raise DatasetError(f"'{name}' must be a list, got {type(records).__name__}",
                                   field_name=name, value=records)

        members = [TeamMember.from_dict(m) for m in member_records]
        index = {member.id: member for member in members}
        tasks = [Task.from_dict(t, index) for t in task_records]

        logger.debug(f"Parsed dataset with {len(tasks)} tasks and {len(members)} members")
        return cls.of(tasks, members)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TaskDataset":
        """Load a JSON (``.json``) or YAML (anything else) snapshot file."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DatasetError(f"Cannot read dataset {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise DatasetError(f"Cannot parse dataset {path}: {e}") from e

        dataset = cls.from_dict(data or {})
        dataset.validate()
        return dataset
