"""Configuration management for the Task Metrics analytics engine."""

import logging
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# Settings that size a series and therefore need at least one bucket
BUCKET_COUNT_FIELDS = frozenset({
    "daily_periods",
    "weekly_periods",
    "monthly_periods",
    "quarterly_periods",
    "cycle_time_trend_months",
})


@dataclass(frozen=True)
class AnalyticsConfig:
    """Heuristic constants used by the calculators.

    Defaults reproduce the business rules the reports were designed around.
    Instances are immutable; build a new one with ``replace`` to tune a value.
    """

    # Bottleneck detection
    bottleneck_threshold_days: float = 7
    risk_per_day_in_status: float = 5
    risk_blocked_weight: float = 30
    risk_high_priority_weight: float = 20
    risk_overdue_weight: float = 25
    max_risk_score: float = 100

    # Project health
    upcoming_deadline_days: float = 7
    velocity_increasing_threshold: float = 70
    velocity_stable_threshold: float = 40
    critical_overdue_threshold: int = 10
    critical_blocker_threshold: int = 5
    high_overdue_threshold: int = 5
    high_blocker_threshold: int = 2
    medium_overdue_threshold: int = 2
    medium_blocker_threshold: int = 0

    # Individual contribution score
    completed_task_weight: float = 10
    in_progress_task_weight: float = 5
    on_time_rate_weight: float = 0.5
    high_completion_bonus: float = 20
    high_completion_threshold: float = 80
    recent_activity_limit: int = 10

    # Trend buckets
    daily_periods: int = 30
    weekly_periods: int = 12
    monthly_periods: int = 12
    quarterly_periods: int = 4
    cycle_time_trend_months: int = 12

    # Forecasting
    in_progress_factor: float = 0.7
    blocked_factor: float = 1.5
    low_confidence_dependency_count: int = 3
    multiple_dependency_count: int = 2

    def __post_init__(self):
        for f in fields(self):
            if f.type is not int:
                continue
            value = getattr(self, f.name)
            minimum = 1 if f.name in BUCKET_COUNT_FIELDS else 0
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(
                    f"Setting '{f.name}' must be a whole number, got {value!r}",
                    suggestions=[f"{f.name}: {f.default}"],
                )
            if value < minimum:
                raise ConfigError(
                    f"Setting '{f.name}' must be at least {minimum}, got {value!r}",
                    suggestions=[f"{f.name}: {f.default}"],
                )

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        return yaml.safe_dump(asdict(self), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalyticsConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping of settings, got {type(data).__name__}")

        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown analytics setting: {key}")
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(
                    f"Setting '{key}' must be a number, got {value!r}",
                    suggestions=[f"{key}: {known[key].default}"],
                )
            if known[key].type is int and isinstance(value, float) and value.is_integer():
                value = int(value)
            values[key] = value
        return cls(**values)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "AnalyticsConfig":
        """Deserialize config from YAML."""
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in analytics config: {e}") from e
        return cls.from_dict(data)


DEFAULT_CONFIG = AnalyticsConfig()


def load_config(config_path: Optional[Union[str, Path]] = None) -> AnalyticsConfig:
    """Load configuration from file, falling back to defaults.

    A missing path (or None) yields the default configuration.
    """
    if config_path is None:
        return DEFAULT_CONFIG

    config_path = Path(config_path)
    if not config_path.exists():
        logger.debug(f"No analytics config at {config_path}, using defaults")
        return DEFAULT_CONFIG

    try:
        with open(config_path, "r") as f:
            yaml_content = f.read()
    except OSError as e:
        raise ConfigError(f"Failed to read config from {config_path}: {e}") from e

    config = AnalyticsConfig.from_yaml(yaml_content)
    logger.debug(f"Loaded analytics configuration from {config_path}")
    return config


def save_config(config: AnalyticsConfig, config_path: Union[str, Path]) -> None:
    """Save configuration to file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_path, "w") as f:
            f.write(config.to_yaml())
    except OSError as e:
        raise ConfigError(f"Failed to save config to {config_path}: {e}") from e
    logger.info(f"Analytics configuration saved to {config_path}")
