"""Tests for the dashboard refresh service.

Run with: pytest tests/test_dashboard_service.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from collectors import SheetFetchError
from config import ConfigError, DashboardConfig, ProjectConfig
from services import DashboardService, build_dashboard, describe_error
from services.dashboard_service import (
    ACCESS_DENIED_MESSAGE,
    CONNECTION_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    NOT_FOUND_MESSAGE,
)
from sheets import SchemaError

SNELLCOIN_CSV = (
    "Date,Account_1,Creative_1,Users_1\n"
    "2024-01-01,acct1,cr_A,5\n"
    "2024-01-02,acct1,cr_A,7\n"
)

EARNTUBE_CSV = (
    "Date,Account_1,Creative_1,Users_1\n"
    "2024-01-01,tube1,clip.mp4,40\n"
    "2024-01-03,tube1,clip.mp4,60\n"
)


@pytest.fixture
def config():
    return DashboardConfig(
        projects={
            "SnellCoin": ProjectConfig(
                name="SnellCoin", emoji="🪙", url="https://docs.google.com/spreadsheets/d/s", gid="0"
            ),
            "EarnTube": ProjectConfig(
                name="EarnTube", emoji="📺", url="https://docs.google.com/spreadsheets/d/e", gid="7"
            ),
        }
    )


@pytest.fixture
def client():
    fake = MagicMock()
    fake.fetch_all = AsyncMock(return_value={"SnellCoin": SNELLCOIN_CSV, "EarnTube": EARNTUBE_CSV})
    return fake


class TestBuildDashboard:
    """Tests for the aggregate-then-merge pipeline."""

    def test_merges_all_projects(self):
        view = build_dashboard({"SnellCoin": SNELLCOIN_CSV, "EarnTube": EARNTUBE_CSV})
        assert view.latest_date == "2024-01-03"
        assert [c.creative for c in view.creative_analytics] == ["clip.mp4", "cr_A"]
        assert list(view.project_stats) == ["SnellCoin", "EarnTube"]

    def test_one_bad_project_fails_everything(self):
        with pytest.raises(SchemaError):
            build_dashboard({"SnellCoin": SNELLCOIN_CSV, "EarnTube": "Date,Creative_1\n2024-01-01,x\n"})


class TestDescribeError:
    """Tests for user-facing error messages."""

    def test_access_denied(self):
        error = SheetFetchError("Failed to load SnellCoin data from any URL. Last error: HTTP 403: Forbidden")
        assert describe_error(error) == ACCESS_DENIED_MESSAGE

    def test_not_found(self):
        assert describe_error(SheetFetchError("HTTP 404: Not Found")) == NOT_FOUND_MESSAGE

    def test_connection_problem(self):
        error = SheetFetchError("Last error: HTTPSConnectionPool(host='docs.google.com'): Max retries exceeded")
        assert describe_error(error) == CONNECTION_MESSAGE

    def test_other_errors_pass_through(self):
        assert describe_error(SchemaError("No account columns found for X (Account_X)")) == (
            "No account columns found for X (Account_X)"
        )

    def test_empty_message_uses_class_name(self):
        assert describe_error(RuntimeError()) == "RuntimeError"


class TestRefresh:
    """Tests for a single refresh."""

    @pytest.mark.asyncio
    async def test_publishes_view(self, config, client):
        service = DashboardService(config, client=client)
        view = await service.refresh()

        assert service.view is view
        assert service.last_update is not None
        assert service.last_error is None
        assert view.summary.total_creatives == 2
        client.fetch_all.assert_awaited_once_with(config.sheet_urls())

    @pytest.mark.asyncio
    async def test_not_configured(self, client):
        service = DashboardService(DashboardConfig(), client=client)
        with pytest.raises(ConfigError):
            await service.refresh()

        assert service.last_error == NOT_CONFIGURED_MESSAGE
        client.fetch_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_view(self, config, client):
        service = DashboardService(config, client=client)
        first = await service.refresh()
        first_update = service.last_update

        client.fetch_all.side_effect = SheetFetchError("HTTP 403: Forbidden")
        with pytest.raises(SheetFetchError):
            await service.refresh()

        assert service.view is first
        assert service.last_update == first_update
        assert service.last_error == ACCESS_DENIED_MESSAGE

    @pytest.mark.asyncio
    async def test_success_clears_error(self, config, client):
        service = DashboardService(config, client=client)
        client.fetch_all.side_effect = [SheetFetchError("HTTP 404: Not Found"), client.fetch_all.return_value]

        with pytest.raises(SheetFetchError):
            await service.refresh()
        assert service.last_error == NOT_FOUND_MESSAGE

        await service.refresh()
        assert service.last_error is None

    @pytest.mark.asyncio
    async def test_bad_sheet_is_not_published(self, config, client):
        client.fetch_all.return_value = {"SnellCoin": SNELLCOIN_CSV, "EarnTube": "Date,Creative_1\n2024-01-01,x\n"}
        service = DashboardService(config, client=client)

        with pytest.raises(SchemaError):
            await service.refresh()

        assert service.view is None
        assert "No account columns found for EarnTube" in service.last_error


class TestRunForever:
    """Tests for the periodic refresh loop."""

    @pytest.mark.asyncio
    async def test_stops_after_callback(self, config, client):
        service = DashboardService(config, client=client)
        calls = []

        def on_refresh(svc):
            calls.append(svc.view)
            if len(calls) == 2:
                svc.stop()

        await service.run_forever(interval=0, on_refresh=on_refresh)

        assert len(calls) == 2
        assert client.fetch_all.await_count == 2

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_the_loop(self, config, client):
        service = DashboardService(config, client=client)
        client.fetch_all.side_effect = [SheetFetchError("HTTP 403: Forbidden"), client.fetch_all.return_value]
        errors = []

        def on_refresh(svc):
            errors.append(svc.last_error)
            if len(errors) == 2:
                svc.stop()

        await service.run_forever(interval=0, on_refresh=on_refresh)

        assert errors == [ACCESS_DENIED_MESSAGE, None]
        assert service.view is not None

    def test_service_built_outside_event_loop(self, config, client):
        """Test the loop runs when the service is created before asyncio.run."""
        service = DashboardService(config, client=client)
        calls = []

        def on_refresh(svc):
            calls.append(svc.last_error)
            if len(calls) == 2:
                svc.stop()

        asyncio.run(service.run_forever(interval=0.01, on_refresh=on_refresh))

        assert calls == [None, None]
        assert client.fetch_all.await_count == 2

    def test_stop_before_start_is_harmless(self, config, client):
        service = DashboardService(config, client=client)
        service.stop()
        assert service.view is None
