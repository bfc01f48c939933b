"""Per-project creative aggregation.

Turns one project's sheet into a creative activity ledger:

- history of every (row, slot) where a creative ran
- running totals, active days and average users per day
- the accounts seen in the sheet
- the slots running on the sheet's latest date

The latest date is taken from the last dated row in file order, not the
maximum date value. Sheets are expected to be appended chronologically.
Every row carrying the latest date contributes active slots.

Example:
    >>> from sheets.aggregator import aggregate_project
    >>> aggregate = aggregate_project(csv_text, "SnellCoin")
    >>> aggregate.creative_history["cr_A"].total_users
    12
"""

import logging
import math
from typing import Dict, Iterator, List, Optional, Tuple

from sheets.models import ActiveSlot, CreativeHistory, ProjectAggregate
from sheets.parser import (
    DATE_COLUMN,
    CellValue,
    SchemaError,
    parse_sheet_csv,
    parse_users,
)

logger = logging.getLogger(__name__)


def round_one_decimal(value: float) -> float:
    """Round half up to one decimal place (2.25 -> 2.3)."""
    return math.floor(value * 10 + 0.5) / 10


def _text(row: Dict[str, CellValue], key: str) -> str:
    value = row.get(key, "")
    if value is None:
        return ""
    return str(value).strip()


def iter_active_slots(
    row: Dict[str, CellValue], account_columns: int
) -> Iterator[Tuple[str, str, int]]:
    """Yield (account, creative, users) for every used slot of a row.

    A slot counts only when both its account and creative cells are
    non-empty.
    """
    for i in range(1, account_columns + 1):
        account = _text(row, f"Account_{i}")
        creative = _text(row, f"Creative_{i}")
        if not account or not creative:
            continue
        yield account, creative, parse_users(row.get(f"Users_{i}"))


def aggregate_project(csv_text: str, project_id: str) -> ProjectAggregate:
    """Aggregate one project's CSV export.

    Args:
        csv_text: Full CSV text; first line is the header.
        project_id: Project key used to tag every derived record.

    Returns:
        ProjectAggregate with creative history, accounts and active slots.

    Raises:
        FormatError: If the CSV has fewer than two lines.
        SchemaError: If the header has no Account_<n> columns.
    """
    sheet = parse_sheet_csv(csv_text, project_id)

    account_columns = sheet.account_column_count
    logger.info(f"{project_id} - Found {account_columns} account columns")
    if account_columns == 0:
        raise SchemaError(f"No account columns found for {project_id} (Account_X)")

    rows = [row for row in sheet.rows if _text(row, DATE_COLUMN)]

    creative_history: Dict[str, CreativeHistory] = {}
    accounts: List[str] = []

    for row in rows:
        date = _text(row, DATE_COLUMN)
        for account, creative, users in iter_active_slots(row, account_columns):
            if account not in accounts:
                accounts.append(account)

            entry = creative_history.get(creative)
            if entry is None:
                entry = CreativeHistory(creative=creative, project=project_id)
                creative_history[creative] = entry
            entry.record(date, account, users)

    for entry in creative_history.values():
        entry.days_active = len({obs.date for obs in entry.history})
        entry.avg_users_per_day = (
            round_one_decimal(entry.total_users / entry.days_active) if entry.days_active > 0 else 0.0
        )

    latest_date: Optional[str] = _text(rows[-1], DATE_COLUMN) if rows else None

    # Sheets may spread one day over several rows; all of them are current.
    active_slots: List[ActiveSlot] = []
    for row in rows:
        if _text(row, DATE_COLUMN) != latest_date:
            continue
        for account, creative, users in iter_active_slots(row, account_columns):
            active_slots.append(
                ActiveSlot(creative=creative, account=account, users=users, project=project_id)
            )

    logger.info(
        f"{project_id} - {len(rows)} dated rows, {len(creative_history)} creatives, "
        f"{len(accounts)} accounts, latest date {latest_date}"
    )

    return ProjectAggregate(
        project=project_id,
        latest_date=latest_date,
        creative_history=creative_history,
        accounts=accounts,
        active_slots=active_slots,
        account_column_count=account_columns,
        row_count=len(rows),
    )
