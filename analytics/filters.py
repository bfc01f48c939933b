"""Filter projection over a DashboardView.

Search and filter selections belong to the caller; applying them never
touches the view itself.
"""

from typing import List, Optional

from analytics.dashboard_models import CreativeAnalytics, DashboardView

ALL = "all"
STATUSES = ("active", "free")
PERFORMANCE_TIERS = ("high", "medium", "low")


def _enabled(value: Optional[str]) -> bool:
    return value is not None and value != "" and value != ALL


def _matches_search(record: CreativeAnalytics, needle: str) -> bool:
    if needle in record.creative.lower():
        return True
    return any(needle in account.lower() for account in record.accounts)


def filter_creatives(
    view: DashboardView,
    *,
    search: Optional[str] = None,
    status: Optional[str] = None,
    project: Optional[str] = None,
    performance: Optional[str] = None,
) -> List[CreativeAnalytics]:
    """Return the creatives matching every active filter, in view order.

    Args:
        view: Dashboard view to project.
        search: Case-insensitive substring of the creative name or one of
            its accounts.
        status: "active" or "free".
        project: Project key owning the creative.
        performance: "high", "medium" or "low".

    Raises:
        ValueError: If status or performance is not a known value.
    """
    if _enabled(status) and status not in STATUSES:
        raise ValueError(f"Unknown status filter: {status}")
    if _enabled(performance) and performance not in PERFORMANCE_TIERS:
        raise ValueError(f"Unknown performance filter: {performance}")

    needle = search.strip().lower() if search else ""

    results = []
    for record in view.creative_analytics:
        if _enabled(status) and record.status != status:
            continue
        if _enabled(project) and record.project != project:
            continue
        if _enabled(performance) and record.performance != performance:
            continue
        if needle and not _matches_search(record, needle):
            continue
        results.append(record)
    return results
