"""
Cross-project merge of sheet aggregates into the dashboard view.

Combines the per-project ledgers built by ``sheets.aggregate_project`` into
one global view:
- one analytics record per creative, classified into a performance tier
- global account list and latest date
- per-project and global summary counters

Creative names are global. When two projects both track a creative with the
same name, the project merged last owns its history (a warning is logged).
"""

import logging
import re
from typing import Dict, List, Mapping, Optional

from analytics.dashboard_models import (
    CreativeAnalytics,
    CurrentAccount,
    DashboardView,
    GlobalSummary,
    PerformanceTier,
    ProjectSummary,
)
from sheets.aggregator import round_one_decimal
from sheets.models import ActiveSlot, CreativeHistory, ProjectAggregate

logger = logging.getLogger(__name__)

# Performance thresholds
HIGH_TOTAL_USERS = 200
MEDIUM_TOTAL_USERS = 50
LOW_MIN_ACCOUNTS = 3
LOW_MAX_AVG_USERS_PER_DAY = 2

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def creative_slug(creative: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return _NON_ALNUM.sub("_", creative)


def classify_performance(total_users: int, account_count: int, avg_users_per_day: float) -> PerformanceTier:
    """Three-tier usage classification.

    Large totals are high, moderate totals are medium. Small creatives spread
    thin over many accounts are low; every other small creative is medium.
    """
    if total_users > HIGH_TOTAL_USERS:
        return "high"
    if total_users > MEDIUM_TOTAL_USERS:
        return "medium"
    if account_count > LOW_MIN_ACCOUNTS and avg_users_per_day < LOW_MAX_AVG_USERS_PER_DAY:
        return "low"
    return "medium"


def _sort_key(record: CreativeAnalytics) -> tuple:
    if record.status == "active":
        return (0, -record.current_users)
    return (1, -record.total_users)


def sort_creatives(records: List[CreativeAnalytics]) -> List[CreativeAnalytics]:
    """Active first by current users, then free by total users; stable."""
    return sorted(records, key=_sort_key)


def _merge_histories(aggregates: Mapping[str, ProjectAggregate]) -> Dict[str, CreativeHistory]:
    merged: Dict[str, CreativeHistory] = {}
    for project_id, aggregate in aggregates.items():
        for creative, history in aggregate.creative_history.items():
            previous = merged.get(creative)
            if previous is not None and previous.project != project_id:
                logger.warning(
                    f"Creative '{creative}' exists in {previous.project} and {project_id}; "
                    f"keeping history from {project_id}"
                )
            merged[creative] = history
    return merged


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _build_record(creative: str, history: CreativeHistory, slots: List[ActiveSlot]) -> CreativeAnalytics:
    return CreativeAnalytics(
        id=creative_slug(creative),
        creative=creative,
        status="active" if slots else "free",
        total_users=history.total_users,
        current_users=sum(slot.users for slot in slots),
        days_active=history.days_active,
        accounts=list(history.accounts),
        current_accounts=[
            CurrentAccount(account=slot.account, project=slot.project, users=slot.users)
            for slot in slots
        ],
        avg_users_per_day=history.avg_users_per_day,
        performance=classify_performance(
            history.total_users, len(history.accounts), history.avg_users_per_day
        ),
        project=history.project,
        last_active_date=history.last_active_date,
    )


def _project_summary(
    project_id: str,
    aggregate: ProjectAggregate,
    records: List[CreativeAnalytics],
    active_slots: List[ActiveSlot],
) -> ProjectSummary:
    project_records = [r for r in records if r.project == project_id]
    return ProjectSummary(
        total_creatives=len(project_records),
        active_creatives=sum(1 for r in project_records if r.status == "active"),
        total_users=sum(r.total_users for r in project_records),
        current_users=sum(s.users for s in active_slots if s.project == project_id),
        total_accounts=len(aggregate.accounts),
    )


def merge_projects(aggregates: Mapping[str, ProjectAggregate]) -> DashboardView:
    """Merge per-project aggregates into one DashboardView.

    Args:
        aggregates: Project aggregates keyed by project id. Iteration order
            decides which project wins a creative name collision.

    Returns:
        A fresh DashboardView; inputs are not modified.
    """
    histories = _merge_histories(aggregates)

    all_accounts: List[str] = []
    active_slots: List[ActiveSlot] = []
    for aggregate in aggregates.values():
        all_accounts.extend(aggregate.accounts)
        active_slots.extend(aggregate.active_slots)
    all_accounts = _dedupe(all_accounts)

    latest_dates = [a.latest_date for a in aggregates.values() if a.latest_date]
    latest_date: Optional[str] = max(latest_dates) if latest_dates else None

    slots_by_creative: Dict[str, List[ActiveSlot]] = {}
    for slot in active_slots:
        slots_by_creative.setdefault(slot.creative, []).append(slot)

    records = sort_creatives(
        [
            _build_record(creative, history, slots_by_creative.get(creative, []))
            for creative, history in histories.items()
        ]
    )

    project_stats = {
        project_id: _project_summary(project_id, aggregate, records, active_slots)
        for project_id, aggregate in aggregates.items()
    }

    active_records = [r for r in records if r.status == "active"]
    total_users_all_time = sum(r.total_users for r in records)
    summary = GlobalSummary(
        total_creatives=len(records),
        active_creatives=len(active_records),
        free_creatives=len(records) - len(active_records),
        total_accounts=len(all_accounts),
        account_columns=sum(a.account_column_count for a in aggregates.values()),
        total_users_all_time=total_users_all_time,
        total_current_users=sum(r.current_users for r in active_records),
        avg_users_per_creative=(
            round_one_decimal(total_users_all_time / len(records)) if records else 0.0
        ),
    )

    logger.info(
        f"Merged {len(aggregates)} projects: {summary.total_creatives} creatives "
        f"({summary.active_creatives} active), {summary.total_accounts} accounts, "
        f"latest date {latest_date}"
    )

    return DashboardView(
        latest_date=latest_date,
        creative_analytics=records,
        all_accounts=all_accounts,
        active_slots=active_slots,
        project_stats=project_stats,
        summary=summary,
    )
