"""Facade running every calculator against one snapshot and one clock reading."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..config import DEFAULT_CONFIG, AnalyticsConfig
from ..domain import TaskDataset
from ..utils.datetime import ensure_aware, now_utc
from .bottlenecks import BottleneckAnalysis, BottleneckDetector
from .cycle_time import CycleTimeAnalyzer, CycleTimeMetrics
from .dashboard import DashboardStats, DashboardStatsCalculator, WorkloadAnalyzer, WorkloadStatistics
from .forecasting import ForecastData, Forecaster
from .performance import (
    IndividualPerformanceReport,
    IndividualReportGenerator,
    TeamPerformanceCalculator,
    TeamPerformanceMetrics,
)
from .project_health import ProjectHealthAssessor, ProjectHealthMetrics
from .trends import CompletionTrend, Granularity, TrendAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class PerformanceReport:
    """Combined report computed against a single instant"""
    team_performance: TeamPerformanceMetrics
    project_health: ProjectHealthMetrics
    individual_reports: List[IndividualPerformanceReport] = field(default_factory=list)
    bottlenecks: List[BottleneckAnalysis] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'teamPerformance': self.team_performance.to_dict(),
            'individualReports': [r.to_dict() for r in self.individual_reports],
            'projectHealth': self.project_health.to_dict(),
            'bottlenecks': [b.to_dict() for b in self.bottlenecks],
        }


class AnalyticsEngine:
    """Entry point for callers that hold a dataset and a clock.

    Every method is a pure function of (dataset, now, arguments); the engine
    keeps no state between calls apart from its configuration and clock.
    """

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG,
                 clock: Callable[[], datetime] = now_utc):
        self.config = config
        self.clock = clock
        self.team = TeamPerformanceCalculator(config)
        self.individual = IndividualReportGenerator(config)
        self.health = ProjectHealthAssessor(config)
        self.bottleneck_detector = BottleneckDetector(config)
        self.trend_analyzer = TrendAnalyzer(config)
        self.cycle_time_analyzer = CycleTimeAnalyzer(config)
        self.forecaster = Forecaster(config)
        self.dashboard = DashboardStatsCalculator()
        self.workload = WorkloadAnalyzer()

    def now(self) -> datetime:
        return ensure_aware(self.clock())

    def team_performance(self, dataset: TaskDataset, start: datetime,
                         end: datetime) -> TeamPerformanceMetrics:
        return self.team.calculate(dataset.tasks, start, end, now=self.now())

    def individual_reports(self, dataset: TaskDataset) -> List[IndividualPerformanceReport]:
        return self.individual.generate(dataset.tasks, dataset.members, now=self.now())

    def project_health(self, dataset: TaskDataset) -> ProjectHealthMetrics:
        return self.health.assess(dataset.tasks, now=self.now())

    def bottlenecks(self, dataset: TaskDataset) -> List[BottleneckAnalysis]:
        return self.bottleneck_detector.detect(dataset.tasks, now=self.now())

    def completion_trend(self, dataset: TaskDataset,
                         granularity: Granularity = Granularity.MONTHLY) -> CompletionTrend:
        return self.trend_analyzer.analyze(dataset.tasks, granularity, now=self.now())

    def cycle_time(self, dataset: TaskDataset) -> CycleTimeMetrics:
        return self.cycle_time_analyzer.analyze(dataset.tasks, now=self.now())

    def forecasts(self, dataset: TaskDataset,
                  cycle_times: Optional[CycleTimeMetrics] = None) -> List[ForecastData]:
        now = self.now()
        if cycle_times is None:
            cycle_times = self.cycle_time_analyzer.analyze(dataset.tasks, now=now)
        return self.forecaster.forecast(dataset.tasks, cycle_times, now=now)

    def dashboard_stats(self, dataset: TaskDataset) -> DashboardStats:
        return self.dashboard.calculate(dataset.tasks, now=self.now())

    def workload_statistics(self, dataset: TaskDataset) -> WorkloadStatistics:
        return self.workload.calculate(dataset.tasks, dataset.members)

    def performance_report(self, dataset: TaskDataset, start: datetime,
                           end: datetime) -> PerformanceReport:
        """Team, individual, health and bottleneck results sharing one ``now``."""
        now = self.now()
        logger.info(f"Building performance report for {len(dataset.tasks)} tasks at {now.isoformat()}")
        return PerformanceReport(
            team_performance=self.team.calculate(dataset.tasks, start, end, now=now),
            individual_reports=self.individual.generate(dataset.tasks, dataset.members, now=now),
            project_health=self.health.assess(dataset.tasks, now=now),
            bottlenecks=self.bottleneck_detector.detect(dataset.tasks, now=now),
        )
