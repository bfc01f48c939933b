"""Naive CSV parsing for Google Sheet exports.

The sheets feeding the dashboard are wide-format: a ``Date`` column followed
by repeating ``Account_<n>``, ``Creative_<n>``, ``Users_<n>`` triples. Parsing
is deliberately simple: lines are split on commas and double quotes are
stripped. Quoted commas are not supported.

Dirty cells never fail a parse. A bad ``Users_<n>`` value becomes 0 and a
missing text cell becomes an empty string.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Union

logger = logging.getLogger(__name__)

DATE_COLUMN = "Date"
USERS_MARKER = "Users_"
ACCOUNT_COLUMN_PATTERN = re.compile(r"^Account_[0-9]+$")
_LEADING_INT_PATTERN = re.compile(r"^[+-]?[0-9]+")

CellValue = Union[str, int]


class SheetError(Exception):
    """Base class for sheets that cannot be aggregated."""

    pass


class FormatError(SheetError):
    """Raised when the CSV has no header or no data lines."""

    pass


class SchemaError(SheetError):
    """Raised when the header has no Account_<n> columns."""

    pass


@dataclass
class ParsedSheet:
    """Header fields and row records of one CSV export."""

    headers: List[str]
    rows: List[Dict[str, CellValue]] = field(default_factory=list)

    @property
    def account_column_count(self) -> int:
        return count_account_columns(self.headers)


def clean_cell(value: str) -> str:
    """Trim a raw cell and drop double quotes."""
    return value.strip().replace('"', "")


def parse_users(value: object) -> int:
    """Parse a users cell the lenient way.

    Takes the leading integer prefix ("12abc" -> 12) and falls back to 0
    for anything without one.

    Examples:
        >>> parse_users("42")
        42
        >>> parse_users("abc")
        0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if value is None:
        return 0
    match = _LEADING_INT_PATTERN.match(str(value).strip())
    if not match:
        return 0
    return int(match.group(0))


def count_account_columns(headers: List[str]) -> int:
    """Number of header fields named exactly Account_<integer>."""
    return sum(1 for header in headers if ACCOUNT_COLUMN_PATTERN.match(header))


def _split_lines(csv_text: str) -> List[str]:
    lines = csv_text.split("\n")
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _convert(header: str, value: str) -> CellValue:
    if header == DATE_COLUMN:
        return value
    if USERS_MARKER in header:
        return parse_users(value)
    return value


def parse_sheet_csv(csv_text: str, project: str = "") -> ParsedSheet:
    """Split CSV text into header fields and row records.

    Args:
        csv_text: Raw CSV export, first line is the header.
        project: Project label, only used in messages.

    Returns:
        ParsedSheet with one dict per non-blank data line.

    Raises:
        FormatError: If the text has fewer than two lines.
    """
    lines = _split_lines(csv_text or "")
    if len(lines) < 2:
        raise FormatError(f"Invalid CSV format for {project or 'sheet'}: expected a header and at least one data row")

    headers = [clean_cell(h) for h in lines[0].split(",")]
    sheet = ParsedSheet(headers=headers)

    for line in lines[1:]:
        if not line.strip():
            continue

        values = line.split(",")
        row: Dict[str, CellValue] = {}
        for index, header in enumerate(headers):
            raw = clean_cell(values[index]) if index < len(values) else ""
            row[header] = _convert(header, raw)
        sheet.rows.append(row)

    logger.debug(f"{project} - Parsed rows: {len(sheet.rows)}")
    logger.debug(f"{project} - Columns: {headers[:10]}")
    return sheet
