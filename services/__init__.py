"""Services package for dashboard orchestration."""

from services.dashboard_service import (
    DashboardService,
    build_dashboard,
    describe_error,
)

__all__ = [
    "DashboardService",
    "build_dashboard",
    "describe_error",
]
