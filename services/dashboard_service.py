"""Dashboard refresh service.

Runs the full pipeline for all configured projects:
fetch every sheet concurrently -> aggregate each project -> merge.

A refresh either publishes a complete new DashboardView or fails as a whole;
on failure the previously published view stays in place.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Mapping, Optional

from analytics.dashboard_models import DashboardView
from analytics.merger import merge_projects
from collectors.sheets_client import SheetsCSVClient
from config.config_manager import ConfigError, DashboardConfig
from sheets.aggregator import aggregate_project
from sheets.models import ProjectAggregate

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Please configure your Google Sheets URLs first"
ACCESS_DENIED_MESSAGE = "Access denied to spreadsheet. Make the spreadsheet public for reading."
NOT_FOUND_MESSAGE = "Spreadsheet not found. Check the spreadsheet ID and sheet GIDs."
CONNECTION_MESSAGE = "Internet connection problem. Check your connection."


def build_dashboard(csv_texts: Mapping[str, str]) -> DashboardView:
    """Aggregate each project's CSV text and merge the results.

    Args:
        csv_texts: CSV text keyed by project, in merge order.

    Raises:
        SheetError: If any project's sheet cannot be aggregated.
    """
    aggregates: Dict[str, ProjectAggregate] = {}
    for project, csv_text in csv_texts.items():
        aggregates[project] = aggregate_project(csv_text, project)
    return merge_projects(aggregates)


def describe_error(error: BaseException) -> str:
    """User-facing message for a failed refresh."""
    message = str(error)
    if "HTTP 403" in message:
        return ACCESS_DENIED_MESSAGE
    if "HTTP 404" in message:
        return NOT_FOUND_MESSAGE
    if "ConnectionError" in message or "Failed to establish" in message or "Max retries" in message:
        return CONNECTION_MESSAGE
    return message or error.__class__.__name__


class DashboardService:
    """
    Keeps the last successfully computed DashboardView.

    Attributes:
        view: Last published view, or None before the first success.
        last_update: When the view was published.
        last_error: User-facing message of the most recent failed refresh,
            cleared by the next success.
    """

    def __init__(self, config: DashboardConfig, client: Optional[SheetsCSVClient] = None):
        self.config = config
        self.client = client or SheetsCSVClient(
            timeout=config.request_timeout_seconds,
            retry_delay=config.retry_delay_seconds,
        )
        self.view: Optional[DashboardView] = None
        self.last_update: Optional[datetime] = None
        self.last_error: Optional[str] = None
        # Bound to the loop running run_forever
        self._stopping: Optional[asyncio.Event] = None

    async def refresh(self) -> DashboardView:
        """Run the full pipeline once and publish the result.

        Returns:
            The newly published DashboardView.

        Raises:
            ConfigError: If some project is missing its URL or gid.
            SheetFetchError: If a sheet cannot be downloaded.
            SheetError: If a sheet cannot be aggregated.
        """
        if not self.config.is_configured:
            self.last_error = NOT_CONFIGURED_MESSAGE
            raise ConfigError(NOT_CONFIGURED_MESSAGE)

        logger.info("Starting multi-project data load from Google Sheets...")
        try:
            csv_texts = await self.client.fetch_all(self.config.sheet_urls())
            view = build_dashboard(csv_texts)
        except Exception as e:
            self.last_error = describe_error(e)
            logger.error(f"Dashboard refresh failed: {e}")
            raise

        self.view = view
        self.last_update = datetime.now()
        self.last_error = None
        logger.info(
            f"Dashboard refreshed: {view.summary.total_creatives} creatives, "
            f"latest date {view.latest_date}"
        )
        return view

    async def run_forever(
        self,
        interval: Optional[float] = None,
        on_refresh: Optional[Callable[["DashboardService"], None]] = None,
    ) -> None:
        """Refresh now and then every ``interval`` seconds until stopped.

        Failed refreshes are logged and the loop keeps going.

        Args:
            interval: Seconds between refreshes (default from config).
            on_refresh: Called with the service after every attempt,
                successful or not.
        """
        interval = interval if interval is not None else self.config.refresh_interval_seconds
        self._stopping = asyncio.Event()

        while not self._stopping.is_set():
            try:
                await self.refresh()
            except Exception as e:
                logger.warning(f"Scheduled refresh failed, keeping previous data: {e}")

            if on_refresh is not None:
                on_refresh(self)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        """Stop a running run_forever loop."""
        if self._stopping is not None:
            self._stopping.set()
