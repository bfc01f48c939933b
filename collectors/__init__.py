"""Creative Usage Dashboard - Collectors Module.

This module downloads the Google Sheets CSV exports feeding the dashboard.

Example:
    >>> from collectors import SheetsCSVClient
    >>>
    >>> client = SheetsCSVClient(timeout=30)
    >>> csv_text = client.fetch_csv(
    ...     "SnellCoin",
    ...     "https://docs.google.com/spreadsheets/d/<id>/export?format=csv&gid=0",
    ... )
"""

from collectors.sheets_client import SheetFetchError, SheetsCSVClient, candidate_urls

__all__ = [
    "SheetsCSVClient",
    "SheetFetchError",
    "candidate_urls",
]
