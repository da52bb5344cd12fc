"""Exceptions raised at the loading boundary of Task Metrics.

The calculators themselves never raise for bad data; only parsing a dataset
or a configuration file does.
"""

from typing import Any, List, Optional


class TaskMetricsError(Exception):
    """Base class for all Task Metrics errors."""


class DatasetError(TaskMetricsError):
    """Raised when a task/member snapshot cannot be parsed."""

    def __init__(self, message: str, record_id: Optional[str] = None,
                 field_name: Optional[str] = None, value: Any = None):
        self.record_id = record_id
        self.field_name = field_name
        self.value = value
        super().__init__(message)


class ConfigError(TaskMetricsError):
    """Raised when an analytics configuration file is unreadable or invalid."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        self.suggestions = suggestions or []
        super().__init__(message)
