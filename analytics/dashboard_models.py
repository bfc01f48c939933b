"""Data models for the merged creative dashboard.

This module defines the dataclasses produced by the cross-project merge:
per-creative analytics, per-project and global summary counters, and the
read-only DashboardView handed to presentation code.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from sheets.models import ActiveSlot

CreativeStatus = Literal["active", "free"]
PerformanceTier = Literal["high", "medium", "low"]


@dataclass
class CurrentAccount:
    """An account a creative is running in on the latest date."""

    account: str
    project: str
    users: int


@dataclass
class CreativeAnalytics:
    """Dashboard row for one creative.

    Attributes:
        id: Display-safe slug of the creative name. Two names that only
            differ in punctuation share a slug.
        creative: Creative name as written in the sheet.
        status: "active" when running on the latest date, else "free".
        total_users: All-time users from the owning project's history.
        current_users: Users across the creative's active slots.
        days_active: Distinct dates the creative ran.
        accounts: Every account it has run under.
        current_accounts: Accounts it runs in on the latest date.
        avg_users_per_day: total_users / days_active, one decimal place.
        performance: "high", "medium" or "low".
        project: Project owning the history.
        last_active_date: Last date the creative appeared in its sheet.
    """

    id: str
    creative: str
    status: CreativeStatus
    total_users: int
    current_users: int
    days_active: int
    accounts: List[str] = field(default_factory=list)
    current_accounts: List[CurrentAccount] = field(default_factory=list)
    avg_users_per_day: float = 0.0
    performance: PerformanceTier = "medium"
    project: str = ""
    last_active_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "creative": self.creative,
            "status": self.status,
            "totalUsers": self.total_users,
            "currentUsers": self.current_users,
            "daysActive": self.days_active,
            "accounts": list(self.accounts),
            "currentAccounts": [
                {"account": a.account, "project": a.project, "users": a.users}
                for a in self.current_accounts
            ],
            "lastActiveDate": self.last_active_date,
            "avgUsersPerDay": self.avg_users_per_day,
            "performance": self.performance,
            "project": self.project,
        }


@dataclass
class ProjectSummary:
    """Counters for a single project."""

    total_creatives: int = 0
    active_creatives: int = 0
    total_users: int = 0
    current_users: int = 0
    total_accounts: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalCreatives": self.total_creatives,
            "activeCreatives": self.active_creatives,
            "totalUsers": self.total_users,
            "currentUsers": self.current_users,
            "totalAccounts": self.total_accounts,
        }


@dataclass
class GlobalSummary:
    """Counters across every project."""

    total_creatives: int = 0
    active_creatives: int = 0
    free_creatives: int = 0
    total_accounts: int = 0
    account_columns: int = 0
    total_users_all_time: int = 0
    total_current_users: int = 0
    avg_users_per_creative: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCreatives": self.total_creatives,
            "activeCreatives": self.active_creatives,
            "freeCreatives": self.free_creatives,
            "totalAccounts": self.total_accounts,
            "accountColumns": self.account_columns,
            "totalUsersAllTime": self.total_users_all_time,
            "totalCurrentUsers": self.total_current_users,
            "avgUsersPerCreative": self.avg_users_per_creative,
        }


@dataclass(frozen=True)
class DashboardView:
    """Merged analytics for all projects, consumed read-only.

    Freezing is shallow: fields cannot be reassigned, but the lists, dicts
    and records they hold are plain containers and must not be modified.
    ``to_dict()`` builds fresh containers, so its payload is safe to edit.

    Attributes:
        latest_date: Greatest latest date across projects, or None.
        creative_analytics: One record per creative, active first.
        all_accounts: Distinct accounts across projects.
        active_slots: Every active slot of every project.
        project_stats: Summary counters per project.
        summary: Global summary counters.
    """

    latest_date: Optional[str]
    creative_analytics: List[CreativeAnalytics]
    all_accounts: List[str]
    active_slots: List[ActiveSlot]
    project_stats: Dict[str, ProjectSummary]
    summary: GlobalSummary

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload with the dashboard's camelCase keys."""
        return {
            "latestDate": self.latest_date,
            "creativeAnalytics": [c.to_dict() for c in self.creative_analytics],
            "allAccounts": list(self.all_accounts),
            "activeCreativesOnLastDate": [
                {
                    "account": slot.account,
                    "creative": slot.creative,
                    "users": slot.users,
                    "project": slot.project,
                }
                for slot in self.active_slots
            ],
            "projectStats": {key: stats.to_dict() for key, stats in self.project_stats.items()},
            "summary": self.summary.to_dict(),
        }
