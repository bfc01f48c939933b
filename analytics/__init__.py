"""Creative Usage Dashboard - Analytics Module.

This module merges per-project sheet aggregates into the dashboard view
and provides filter projections over it.

Example:
    >>> from sheets import aggregate_project
    >>> from analytics import merge_projects, filter_creatives
    >>>
    >>> view = merge_projects({
    ...     "SnellCoin": aggregate_project(snellcoin_csv, "SnellCoin"),
    ...     "EarnTube": aggregate_project(earntube_csv, "EarnTube"),
    ... })
    >>> print(f"Active: {view.summary.active_creatives}")
    >>> top = filter_creatives(view, status="active", performance="high")
"""

from analytics.dashboard_models import (
    CreativeAnalytics,
    CurrentAccount,
    DashboardView,
    GlobalSummary,
    ProjectSummary,
)
from analytics.filters import filter_creatives
from analytics.merger import classify_performance, creative_slug, merge_projects, sort_creatives

__all__ = [
    # Models
    "CreativeAnalytics",
    "CurrentAccount",
    "DashboardView",
    "GlobalSummary",
    "ProjectSummary",
    # Merge
    "merge_projects",
    "classify_performance",
    "creative_slug",
    "sort_creatives",
    # Projections
    "filter_creatives",
]
