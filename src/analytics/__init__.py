"""
Review Analytics Module
=======================

Aggregations recomputed on demand from a review snapshot:
    - compute_property_stats / compute_property_analytics
    - PerformanceScorer (0-100 weighted score per property)
    - compute_trends (week / month / quarter / year buckets)
    - generate_insights / detect_issues
    - build_dashboard

Usage:
    from src.analytics import build_dashboard

    summary = build_dashboard(storage.get_all(), top_n=5)
    payload = summary.to_dict()
"""

from .performance_config import PerformanceConfig, DEFAULT_PERFORMANCE_CONFIG
from .property_stats import (
    ChannelBreakdown,
    PropertyStats,
    compute_property_stats,
    compute_category_ratings,
)
from .performance_scorer import (
    ComponentScore,
    PerformanceScore,
    PerformanceScorer,
    PropertyAnalytics,
    compute_property_analytics,
)
from .trends import TrendPeriod, TrendBucket, compute_trends, period_key, parse_period
from .insights import Insight, Issue, generate_insights, detect_issues
from .dashboard import (
    ChannelPerformance,
    DashboardSummary,
    build_dashboard,
    channel_performance,
    recent_activity,
    top_properties,
)

__all__ = [
    "PerformanceConfig",
    "DEFAULT_PERFORMANCE_CONFIG",
    "ChannelBreakdown",
    "PropertyStats",
    "compute_property_stats",
    "compute_category_ratings",
    "ComponentScore",
    "PerformanceScore",
    "PerformanceScorer",
    "PropertyAnalytics",
    "compute_property_analytics",
    "TrendPeriod",
    "TrendBucket",
    "compute_trends",
    "period_key",
    "parse_period",
    "Insight",
    "Issue",
    "generate_insights",
    "detect_issues",
    "ChannelPerformance",
    "DashboardSummary",
    "build_dashboard",
    "channel_performance",
    "recent_activity",
    "top_properties",
]
