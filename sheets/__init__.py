"""Sheet aggregation for the creative usage dashboard.

Parses one project's Google Sheet CSV export and builds its creative
activity ledger.

Example:
    >>> from sheets import aggregate_project
    >>>
    >>> aggregate = aggregate_project(csv_text, "SnellCoin")
    >>> print(aggregate.latest_date, len(aggregate.active_slots))
"""

from sheets.aggregator import aggregate_project, iter_active_slots, round_one_decimal
from sheets.models import ActiveSlot, CreativeHistory, Observation, ProjectAggregate
from sheets.parser import (
    FormatError,
    ParsedSheet,
    SchemaError,
    SheetError,
    count_account_columns,
    parse_sheet_csv,
    parse_users,
)

__all__ = [
    # Aggregation
    "aggregate_project",
    "iter_active_slots",
    "round_one_decimal",
    # Parsing
    "parse_sheet_csv",
    "parse_users",
    "count_account_columns",
    "ParsedSheet",
    # Models
    "ActiveSlot",
    "CreativeHistory",
    "Observation",
    "ProjectAggregate",
    # Errors
    "SheetError",
    "FormatError",
    "SchemaError",
]
