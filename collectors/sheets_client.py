"""Google Sheets CSV export fetcher.

Published Google Sheets can be downloaded as CSV through a few slightly
different endpoints, and which one answers depends on how the sheet was
shared. The client tries an ordered list of candidate URLs and returns the
first plausible payload.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

CSV_ACCEPT_HEADER = "text/csv,application/csv,text/plain"
# Shorter payloads are error pages or empty tabs
MIN_PAYLOAD_LENGTH = 50


class SheetFetchError(Exception):
    """Raised when no candidate URL yields CSV data for a project."""

    pass


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def candidate_urls(csv_url: str, now_ms: Optional[int] = None) -> List[str]:
    """Candidate CSV URLs for a sheet export URL, in the order to try them.

    Args:
        csv_url: Export URL of the form ``.../export?format=csv&gid=<gid>``.
        now_ms: Cache-busting timestamp; defaults to the current time.

    Returns:
        The direct export URL, the gviz CSV endpoint, and the published
        single-sheet variant.
    """
    stamp = now_ms if now_ms is not None else _timestamp_ms()
    return [
        f"{csv_url}&timestamp={stamp}",
        csv_url.replace("/export?format=csv", "/gviz/tq?tqx=out:csv"),
        f"{csv_url}&single=true&output=csv&timestamp={stamp}",
    ]


class SheetsCSVClient:
    """Fetches CSV exports of Google Sheets.

    Attributes:
        timeout: Per-request timeout in seconds.
        retry_delay: Seconds to wait between candidate URLs.

    Example:
        >>> client = SheetsCSVClient(timeout=30)
        >>> texts = await client.fetch_all({"SnellCoin": snellcoin_url})
        >>> texts["SnellCoin"].splitlines()[0]
        'Date,Account_1,Creative_1,Users_1'
    """

    DEFAULT_TIMEOUT = 30.0
    RETRY_DELAY = 1.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        retry_delay: float = RETRY_DELAY,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Per-request timeout in seconds.
            retry_delay: Seconds to wait between candidate URLs.
            session: Optional requests session (a new one is created otherwise).
            sleep: Sleep function used between attempts.
        """
        self.timeout = timeout
        self.retry_delay = retry_delay
        self._session = session
        self._sleep = sleep

    def _get_session(self) -> requests.Session:
        """Lazy initialization of the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _fetch_candidate(self, url: str) -> str:
        response = self._get_session().get(
            url,
            headers={"Accept": CSV_ACCEPT_HEADER, "Cache-Control": "no-cache"},
            timeout=self.timeout,
        )
        if not response.ok:
            raise SheetFetchError(f"HTTP {response.status_code}: {response.reason}")

        text = response.text
        if not text or len(text.strip()) < MIN_PAYLOAD_LENGTH:
            raise SheetFetchError("Received empty or too short data")
        return text

    def fetch_csv(self, project: str, csv_url: str) -> str:
        """Download one project's CSV, trying each candidate URL in turn.

        Args:
            project: Project key, used in log and error messages.
            csv_url: Sheet export URL.

        Returns:
            The CSV text.

        Raises:
            SheetFetchError: If every candidate URL fails.
        """
        logger.info(f"Loading {project} data from sheet...")
        urls = candidate_urls(csv_url)
        last_error: Optional[Exception] = None

        for attempt, url in enumerate(urls, start=1):
            try:
                logger.debug(f"{project} attempt {attempt}/{len(urls)}: {url}")
                text = self._fetch_candidate(url)
                logger.info(f"{project} data loaded ({len(text)} characters)")
                return text
            except (requests.RequestException, SheetFetchError) as e:
                last_error = e
                logger.warning(f"{project} URL {attempt} failed: {e}")
                if attempt < len(urls):
                    self._sleep(self.retry_delay)

        message = str(last_error) if last_error else "unknown error"
        logger.error(f"Failed to load {project} data: {message}")
        raise SheetFetchError(
            f"Failed to load {project} data from any URL. Last error: {message}"
        ) from last_error

    async def fetch_all(self, urls: Dict[str, str]) -> Dict[str, str]:
        """Fetch every project concurrently.

        Args:
            urls: CSV export URLs keyed by project.

        Returns:
            CSV texts keyed by project, in the order of ``urls``.

        Raises:
            SheetFetchError: If any project fails.
        """
        loop = asyncio.get_event_loop()
        projects = list(urls)
        texts = await asyncio.gather(
            *(
                loop.run_in_executor(None, self.fetch_csv, project, urls[project])
                for project in projects
            )
        )
        return dict(zip(projects, texts))
