"""Data models for per-project sheet aggregation."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Observation:
    """One (row, slot) occurrence of a creative."""

    date: str
    account: str
    users: int
    project: str


@dataclass
class CreativeHistory:
    """Everything one project's sheet says about a single creative.

    Attributes:
        creative: Creative identifier as written in the sheet.
        project: Project the sheet belongs to.
        total_users: Sum of users over every observation.
        accounts: Distinct accounts the creative ran under, in first-seen order.
        history: Observations in row order.
        days_active: Number of distinct dates in history.
        avg_users_per_day: total_users / days_active, one decimal place.
        first_seen_date: Date of the first observation.
        last_active_date: Date of the last observation in row order.
    """

    creative: str
    project: str
    total_users: int = 0
    accounts: List[str] = field(default_factory=list)
    history: List[Observation] = field(default_factory=list)
    days_active: int = 0
    avg_users_per_day: float = 0.0
    first_seen_date: Optional[str] = None
    last_active_date: Optional[str] = None

    def record(self, date: str, account: str, users: int) -> None:
        """Append one observation and keep the running totals in step."""
        self.history.append(Observation(date=date, account=account, users=users, project=self.project))
        self.total_users += users
        if account not in self.accounts:
            self.accounts.append(account)
        if self.first_seen_date is None:
            self.first_seen_date = date
        self.last_active_date = date


@dataclass
class ActiveSlot:
    """A creative running in an account on the project's latest date."""

    creative: str
    account: str
    users: int
    project: str


@dataclass
class ProjectAggregate:
    """Result of aggregating one project's sheet."""

    project: str
    latest_date: Optional[str]
    creative_history: Dict[str, CreativeHistory] = field(default_factory=dict)
    accounts: List[str] = field(default_factory=list)
    active_slots: List[ActiveSlot] = field(default_factory=list)
    account_column_count: int = 0
    row_count: int = 0
