"""Analytics services for Task Metrics."""

from .performance import (
    TeamPerformanceCalculator,
    TeamPerformanceMetrics,
    IndividualReportGenerator,
    IndividualPerformanceReport,
    ActivityEntry,
)
from .project_health import ProjectHealthAssessor, ProjectHealthMetrics, RiskLevel, VelocityTrend
from .bottlenecks import BottleneckDetector, BottleneckAnalysis
from .trends import TrendAnalyzer, CompletionTrend, TrendData, Granularity
from .cycle_time import CycleTimeAnalyzer, CycleTimeMetrics
from .forecasting import Forecaster, ForecastData, ConfidenceLevel
from .dashboard import (
    DashboardStatsCalculator,
    DashboardStats,
    WorkloadAnalyzer,
    WorkloadStatistics,
    MemberWorkload,
)
from .charts import build_chart_data
from .engine import AnalyticsEngine, PerformanceReport

__all__ = [
    "TeamPerformanceCalculator",
    "TeamPerformanceMetrics",
    "IndividualReportGenerator",
    "IndividualPerformanceReport",
    "ActivityEntry",
    "ProjectHealthAssessor",
    "ProjectHealthMetrics",
    "RiskLevel",
    "VelocityTrend",
    "BottleneckDetector",
    "BottleneckAnalysis",
    "TrendAnalyzer",
    "CompletionTrend",
    "TrendData",
    "Granularity",
    "CycleTimeAnalyzer",
    "CycleTimeMetrics",
    "Forecaster",
    "ForecastData",
    "ConfidenceLevel",
    "DashboardStatsCalculator",
    "DashboardStats",
    "WorkloadAnalyzer",
    "WorkloadStatistics",
    "MemberWorkload",
    "build_chart_data",
    "AnalyticsEngine",
    "PerformanceReport",
]
